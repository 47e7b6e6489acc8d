"""
Remote document-store service.

Transport layer for the per-user document collections. Turning documents into
notes and keeping the local cache consistent is the synchronizer's job.
"""

from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from quicknotes.logging import get_logger
from quicknotes.models import DocumentDeleted, DocumentsRead, DocumentWritten, RemoteDocument
from quicknotes.services.remote import RemoteError, RemoteService

logger = get_logger('services.document_store')


def _parse_document(body: Any) -> RemoteDocument:
    if isinstance(body, dict) and isinstance(body.get("document"), dict):
        body = body["document"]
    try:
        return RemoteDocument.model_validate(body)
    except ValidationError as e:
        raise RemoteError(f"Malformed document payload: {e.error_count()} invalid field(s)") from e


class DocumentStoreService(RemoteService):
    """Document-store collaborator backed by the HTTP collections API."""

    async def read_documents(self, collection: str) -> DocumentsRead:
        try:
            body = await self._request("GET", f"/collections/{quote(collection, safe='')}/documents")
            if body is None:
                raw = []
            elif isinstance(body, dict):
                raw = body.get("documents") or []
            else:
                raw = None
            if not isinstance(raw, list):
                raise RemoteError("Malformed documents payload: expected an object with a documents list")
            documents = [_parse_document(item) for item in raw]
        except RemoteError as e:
            logger.error(f"Failed to read collection {collection}: {e}")
            return DocumentsRead(success=False, error=str(e))

        logger.debug(f"Read {len(documents)} documents from {collection}")
        return DocumentsRead(success=True, documents=documents)

    async def create_document(self, collection: str, data: dict[str, Any]) -> DocumentWritten:
        try:
            body = await self._request(
                "POST",
                f"/collections/{quote(collection, safe='')}/documents",
                json={"data": data},
                idempotent=False,
            )
            document = _parse_document(body)
        except RemoteError as e:
            logger.error(f"Failed to create document in {collection}: {e}")
            return DocumentWritten(success=False, error=str(e))

        logger.info(f"Created document {document.id} in {collection}")
        return DocumentWritten(success=True, document=document)

    async def update_document(self, document_id: str, patch: dict[str, Any]) -> DocumentWritten:
        try:
            body = await self._request(
                "PATCH",
                f"/documents/{quote(document_id, safe='')}",
                json={"data": patch},
            )
            document = _parse_document(body) if body else None
        except RemoteError as e:
            logger.error(f"Failed to update document {document_id}: {e}")
            return DocumentWritten(success=False, error=str(e))

        logger.info(f"Updated document {document_id}")
        return DocumentWritten(success=True, document=document)

    async def delete_document(self, document_id: str, permanent: bool = False) -> DocumentDeleted:
        try:
            await self._request(
                "DELETE",
                f"/documents/{quote(document_id, safe='')}",
                params={"permanent": "true" if permanent else "false"},
            )
        except RemoteError as e:
            logger.error(f"Failed to delete document {document_id}: {e}")
            return DocumentDeleted(success=False, error=str(e))

        logger.info(f"Deleted document {document_id} ({'permanent' if permanent else 'soft'})")
        return DocumentDeleted(success=True)
