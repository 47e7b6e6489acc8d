"""Note collection cache and the create/edit/delete synchronization protocol."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from quicknotes.logging import get_logger
from quicknotes.models import (
    DraftResult,
    EditDraft,
    ErrorKind,
    Note,
    NoteDraft,
    NoteDraftUpdate,
    NoteMutation,
    NotesLoaded,
    NotesSnapshot,
    RemoteDocument,
)
from quicknotes.services.collaborators import DocumentStore
from quicknotes.services.session_manager import SessionManager

logger = get_logger('services.note_sync')


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _document_to_note(document: RemoteDocument) -> Note:
    data = document.data
    fields = {
        "id": document.id,
        "title": data.get("title") or "",
        "content": data.get("content") or "",
        "created_at": data.get("createdAt") or data.get("created_at"),
    }
    try:
        return Note(**fields)
    except ValidationError:
        if fields["created_at"] is None:
            raise
        logger.warning(f"Ignoring unreadable createdAt on note {document.id}: {fields['created_at']!r}")
        fields["created_at"] = None
        return Note(**fields)


def _apply(draft, fields: NoteDraftUpdate):
    return draft.model_copy(update=fields.model_dump(exclude_none=True))


class NoteCollectionSynchronizer:
    """
    Owns the cached note collection plus the create and edit drafts.

    Every successful write is followed by a full reload; the cache is never
    patched locally. Writes go through a single gate, loads carry sequence
    numbers so an older response cannot overwrite a newer one, and responses
    that arrive after the session ended are dropped.
    """

    def __init__(self, store: DocumentStore, session: SessionManager, collection: str = "notes"):
        self.store = store
        self.session = session
        self.collection = collection

        self._notes: tuple[Note, ...] = ()
        self._create_draft: Optional[NoteDraft] = None
        self._edit_draft: Optional[EditDraft] = None

        self._write_lock = asyncio.Lock()
        self._issued_seq = 0
        self._applied_seq = 0
        self._generation = session.generation

    # ── Observation ──

    @property
    def notes(self) -> tuple[Note, ...]:
        self._check_generation()
        return self._notes

    @property
    def active_note_id(self) -> Optional[str]:
        return self._edit_draft.note_id if self._edit_draft else None

    @property
    def create_draft(self) -> Optional[NoteDraft]:
        return self._create_draft.model_copy() if self._create_draft else None

    @property
    def edit_draft(self) -> Optional[EditDraft]:
        return self._edit_draft.model_copy() if self._edit_draft else None

    def snapshot(self) -> NotesSnapshot:
        self._check_generation()
        return NotesSnapshot(
            notes=list(self._notes),
            create_draft=self.create_draft,
            edit_draft=self.edit_draft,
        )

    def reset(self) -> None:
        """Forget everything cached for the previous session."""
        self._notes = ()
        self._create_draft = None
        self._edit_draft = None
        self._issued_seq += 1
        self._applied_seq = self._issued_seq
        self._generation = self.session.generation

    # ── Guards ──

    def _check_generation(self) -> None:
        if self._generation != self.session.generation:
            logger.debug("Session changed since the cache was filled; resetting")
            self.reset()

    def _not_signed_in(self) -> Optional[str]:
        self._check_generation()
        if not self.session.is_authenticated:
            return "Not signed in"
        return None

    def _session_ended(self, generation: int) -> bool:
        return not self.session.is_authenticated or self.session.generation != generation

    def _find(self, note_id: str) -> Optional[Note]:
        return next((n for n in self._notes if n.id == note_id), None)

    # ── Loading ──

    async def load(self) -> NotesLoaded:
        error = self._not_signed_in()
        if error:
            return NotesLoaded(success=False, error=error, error_kind=ErrorKind.INVALID_STATE)
        return await self._reload()

    async def _reload(self) -> NotesLoaded:
        self._issued_seq += 1
        seq = self._issued_seq
        generation = self.session.generation

        try:
            result = await self.store.read_documents(self.collection)
        except Exception as e:
            logger.error(f"Document store read raised: {e}")
            return NotesLoaded(success=False, error=str(e) or type(e).__name__, error_kind=ErrorKind.REMOTE, sequence=seq)

        if self._session_ended(generation):
            logger.info(f"Discarding load #{seq}: session ended while it was in flight")
            return NotesLoaded(success=False, error="Session ended", error_kind=ErrorKind.STALE, sequence=seq)
        if not result.success:
            return NotesLoaded(success=False, error=result.error or "Could not load notes", error_kind=ErrorKind.REMOTE, sequence=seq)

        try:
            notes = tuple(_document_to_note(d) for d in result.documents)
        except ValidationError as e:
            logger.error(f"Collection {self.collection} returned a malformed note: {e}")
            return NotesLoaded(success=False, error="Malformed note in collection", error_kind=ErrorKind.REMOTE, sequence=seq)

        if seq < self._applied_seq:
            logger.debug(f"Discarding load #{seq}: load #{self._applied_seq} already applied")
            return NotesLoaded(success=False, error="Superseded by a newer load", error_kind=ErrorKind.STALE, sequence=seq)

        self._notes = notes
        self._applied_seq = seq
        if self._edit_draft and self._find(self._edit_draft.note_id) is None:
            logger.info(f"Note {self._edit_draft.note_id} is gone; dropping its edit draft")
            self._edit_draft = None

        logger.debug(f"Applied load #{seq} with {len(notes)} notes")
        return NotesLoaded(success=True, notes=list(notes), sequence=seq)

    async def _finish_write(self, note_id: Optional[str]) -> NoteMutation:
        reload = await self._reload()
        return NoteMutation(
            success=True,
            note_id=note_id,
            reloaded=reload.success,
            reload_error=reload.error,
        )

    # ── Create ──

    def begin_create(self, draft: Optional[NoteDraft] = None) -> DraftResult:
        error = self._not_signed_in()
        if error:
            return DraftResult(success=False, error=error, error_kind=ErrorKind.INVALID_STATE)
        if draft is not None:
            self._create_draft = draft.model_copy()
        elif self._create_draft is None:
            self._create_draft = NoteDraft()
        return DraftResult(success=True, create_draft=self.create_draft)

    def update_create_draft(self, fields: NoteDraftUpdate) -> DraftResult:
        self._check_generation()
        if self._create_draft is None:
            return DraftResult(success=False, error="No note is being composed", error_kind=ErrorKind.INVALID_STATE)
        self._create_draft = _apply(self._create_draft, fields)
        return DraftResult(success=True, create_draft=self.create_draft)

    def cancel_create(self) -> DraftResult:
        self._check_generation()
        self._create_draft = None
        return DraftResult(success=True)

    async def create(self, draft: Optional[NoteDraft] = None) -> NoteMutation:
        error = self._not_signed_in()
        if error:
            return NoteMutation(success=False, error=error, error_kind=ErrorKind.INVALID_STATE)

        draft = draft or self._create_draft or NoteDraft()
        title = draft.title.strip()
        if not title:
            return NoteMutation(success=False, error="Title must not be empty", error_kind=ErrorKind.VALIDATION)

        # Taken before queueing on the gate so a write never outlives its session.
        generation = self.session.generation
        async with self._write_lock:
            if self._session_ended(generation):
                return NoteMutation(success=False, error="Session ended", error_kind=ErrorKind.STALE)
            data = {"title": title, "content": draft.content, "createdAt": _now()}
            try:
                result = await self.store.create_document(self.collection, data)
            except Exception as e:
                logger.error(f"Document store create raised: {e}")
                return NoteMutation(success=False, error=str(e) or type(e).__name__, error_kind=ErrorKind.REMOTE)

            if self._session_ended(generation):
                return NoteMutation(success=False, error="Session ended", error_kind=ErrorKind.STALE)
            if not result.success:
                return NoteMutation(success=False, error=result.error or "Could not create note", error_kind=ErrorKind.REMOTE)

            self._create_draft = None
            note_id = result.document.id if result.document else None
            return await self._finish_write(note_id)

    # ── Edit ──

    def begin_edit(self, note_id: str) -> DraftResult:
        error = self._not_signed_in()
        if error:
            return DraftResult(success=False, error=error, error_kind=ErrorKind.INVALID_STATE)

        note = self._find(note_id)
        if note is None:
            return DraftResult(success=False, error=f"Note {note_id} not found", error_kind=ErrorKind.NOT_FOUND)

        if self._edit_draft and self._edit_draft.note_id != note_id:
            logger.debug(f"Discarding edit draft for {self._edit_draft.note_id}")
        self._edit_draft = EditDraft(note_id=note.id, title=note.title, content=note.content)
        return DraftResult(success=True, edit_draft=self.edit_draft)

    def update_edit_draft(self, fields: NoteDraftUpdate) -> DraftResult:
        self._check_generation()
        if self._edit_draft is None:
            return DraftResult(success=False, error="No note is being edited", error_kind=ErrorKind.INVALID_STATE)
        self._edit_draft = _apply(self._edit_draft, fields)
        return DraftResult(success=True, edit_draft=self.edit_draft)

    def cancel_edit(self) -> DraftResult:
        self._check_generation()
        self._edit_draft = None
        return DraftResult(success=True)

    async def commit_edit(self) -> NoteMutation:
        error = self._not_signed_in()
        if error:
            return NoteMutation(success=False, error=error, error_kind=ErrorKind.INVALID_STATE)
        if self._edit_draft is None:
            return NoteMutation(success=False, error="No note is being edited", error_kind=ErrorKind.INVALID_STATE)

        draft = self._edit_draft.model_copy()
        title = draft.title.strip()
        if not title:
            return NoteMutation(success=False, error="Title must not be empty", error_kind=ErrorKind.VALIDATION, note_id=draft.note_id)

        generation = self.session.generation
        async with self._write_lock:
            if self._session_ended(generation):
                return NoteMutation(success=False, error="Session ended", error_kind=ErrorKind.STALE, note_id=draft.note_id)
            try:
                result = await self.store.update_document(
                    draft.note_id, {"title": title, "content": draft.content}
                )
            except Exception as e:
                logger.error(f"Document store update raised: {e}")
                return NoteMutation(success=False, error=str(e) or type(e).__name__, error_kind=ErrorKind.REMOTE, note_id=draft.note_id)

            if self._session_ended(generation):
                return NoteMutation(success=False, error="Session ended", error_kind=ErrorKind.STALE, note_id=draft.note_id)
            if not result.success:
                return NoteMutation(success=False, error=result.error or "Could not save note", error_kind=ErrorKind.REMOTE, note_id=draft.note_id)

            if self.active_note_id == draft.note_id:
                self._edit_draft = None
            return await self._finish_write(draft.note_id)

    # ── Delete ──

    async def delete(self, note_id: str) -> NoteMutation:
        """Soft-delete a note. Confirmation is expected to have happened already."""
        error = self._not_signed_in()
        if error:
            return NoteMutation(success=False, error=error, error_kind=ErrorKind.INVALID_STATE, note_id=note_id)

        generation = self.session.generation
        async with self._write_lock:
            if self._session_ended(generation):
                return NoteMutation(success=False, error="Session ended", error_kind=ErrorKind.STALE, note_id=note_id)
            try:
                result = await self.store.delete_document(note_id, permanent=False)
            except Exception as e:
                logger.error(f"Document store delete raised: {e}")
                return NoteMutation(success=False, error=str(e) or type(e).__name__, error_kind=ErrorKind.REMOTE, note_id=note_id)

            if self._session_ended(generation):
                return NoteMutation(success=False, error="Session ended", error_kind=ErrorKind.STALE, note_id=note_id)
            if not result.success:
                return NoteMutation(success=False, error=result.error or "Could not delete note", error_kind=ErrorKind.REMOTE, note_id=note_id)

            if self.active_note_id == note_id:
                self._edit_draft = None
            return await self._finish_write(note_id)
