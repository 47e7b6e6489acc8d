"""Contracts the core expects from its identity and document-store collaborators."""

from typing import Any, Protocol

from quicknotes.models import (
    CodeRequested,
    CodeVerified,
    DocumentDeleted,
    DocumentsRead,
    DocumentWritten,
    PersistedSession,
)


class IdentityProvider(Protocol):
    async def request_code(self, email: str) -> CodeRequested: ...

    async def verify_code(self, email: str, code: str) -> CodeVerified: ...

    async def get_persisted_session(self) -> PersistedSession: ...

    async def clear_persisted_session(self) -> None: ...


class DocumentStore(Protocol):
    """Document collection scoped to the signed-in user by the store itself."""

    async def read_documents(self, collection: str) -> DocumentsRead: ...

    async def create_document(self, collection: str, data: dict[str, Any]) -> DocumentWritten: ...

    async def update_document(self, document_id: str, patch: dict[str, Any]) -> DocumentWritten: ...

    async def delete_document(self, document_id: str, permanent: bool = False) -> DocumentDeleted: ...
