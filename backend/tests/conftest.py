import asyncio
from typing import Any

import pytest

from quicknotes.models import (
    CodeRequested,
    CodeVerified,
    DocumentDeleted,
    DocumentsRead,
    DocumentWritten,
    PersistedSession,
    RemoteDocument,
    User,
)
from quicknotes.services.note_sync import NoteCollectionSynchronizer
from quicknotes.services.session_manager import SessionManager

VALID_CODE = "123456"


class FakeIdentity:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.persisted: User | None = None
        self.request_error: str | None = None
        self.restore_error: str | None = None

    async def request_code(self, email: str) -> CodeRequested:
        self.calls.append(("request_code", email))
        if self.request_error:
            return CodeRequested(success=False, error=self.request_error)
        return CodeRequested(success=True)

    async def verify_code(self, email: str, code: str) -> CodeVerified:
        self.calls.append(("verify_code", email, code))
        if code != VALID_CODE:
            return CodeVerified(success=False, error="Invalid or expired code")
        self.persisted = User(id="u1", email=email)
        return CodeVerified(success=True, user=self.persisted)

    async def get_persisted_session(self) -> PersistedSession:
        self.calls.append(("get_persisted_session",))
        if self.restore_error:
            return PersistedSession(success=False, error=self.restore_error)
        return PersistedSession(success=True, user=self.persisted)

    async def clear_persisted_session(self) -> None:
        self.calls.append(("clear_persisted_session",))
        self.persisted = None


class FakeDocumentStore:
    """In-memory collection with soft delete and optional gates to hold reads open."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.documents: dict[str, dict[str, Any]] = {}
        self.deleted: set[str] = set()
        self.fail: set[str] = set()
        self.read_gates: list[asyncio.Event | None] = []
        self._next_id = 1

    def seed(self, doc_id: str, title: str, content: str = "", created_at: str = "2024-01-01T00:00:00+00:00") -> None:
        self.documents[doc_id] = {"title": title, "content": content, "createdAt": created_at}

    async def read_documents(self, collection: str) -> DocumentsRead:
        self.calls.append(("read", collection))
        snapshot = [
            RemoteDocument(id=doc_id, data=dict(data))
            for doc_id, data in self.documents.items()
            if doc_id not in self.deleted
        ]
        gate = self.read_gates.pop(0) if self.read_gates else None
        if gate is not None:
            await gate.wait()
        if "read" in self.fail:
            return DocumentsRead(success=False, error="network down")
        return DocumentsRead(success=True, documents=snapshot)

    async def create_document(self, collection: str, data: dict[str, Any]) -> DocumentWritten:
        self.calls.append(("create", collection, dict(data)))
        if "create" in self.fail:
            return DocumentWritten(success=False, error="store unavailable")
        doc_id = f"n{self._next_id}"
        self._next_id += 1
        self.documents[doc_id] = dict(data)
        return DocumentWritten(success=True, document=RemoteDocument(id=doc_id, data=dict(data)))

    async def update_document(self, document_id: str, patch: dict[str, Any]) -> DocumentWritten:
        self.calls.append(("update", document_id, dict(patch)))
        if "update" in self.fail or document_id not in self.documents:
            return DocumentWritten(success=False, error="update rejected")
        self.documents[document_id].update(patch)
        return DocumentWritten(success=True, document=RemoteDocument(id=document_id, data=self.documents[document_id]))

    async def delete_document(self, document_id: str, permanent: bool = False) -> DocumentDeleted:
        self.calls.append(("delete", document_id, permanent))
        if "delete" in self.fail:
            return DocumentDeleted(success=False, error="delete rejected")
        if permanent:
            self.documents.pop(document_id, None)
        else:
            self.deleted.add(document_id)
        return DocumentDeleted(success=True)

    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] != "read"]


async def _sign_in(manager: SessionManager, email: str = "a@b.com") -> None:
    await manager.request_code(email)
    result = await manager.verify_code(email, VALID_CODE)
    assert result.success


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def documents() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def manager(identity: FakeIdentity) -> SessionManager:
    return SessionManager(identity)


@pytest.fixture
def sync(documents: FakeDocumentStore, manager: SessionManager) -> NoteCollectionSynchronizer:
    return NoteCollectionSynchronizer(documents, manager, collection="notes")


@pytest.fixture
def sign_in():
    return _sign_in
