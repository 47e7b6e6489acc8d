"""
Outcome models returned by the session manager and note synchronizer.
"""

from pydantic import BaseModel, Field
from typing import Optional

from quicknotes.models.domain import EditDraft, Note, NoteDraft, Session
from quicknotes.models.enums import ErrorKind


class OperationResult(BaseModel):
    """Base outcome for a core operation."""
    success: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


class SessionResult(OperationResult):
    """Outcome of a session transition, with the session as it stands afterwards."""
    session: Session
    established: bool = False


class SignInResult(SessionResult):
    """Outcome of a sign-in, plus how the initial note load went."""
    notes_loaded: bool = False
    load_error: Optional[str] = None


class NotesLoaded(OperationResult):
    """Outcome of a collection load."""
    notes: list[Note] = Field(default_factory=list)
    sequence: Optional[int] = None


class NoteMutation(OperationResult):
    """Outcome of a create, update or delete followed by a reload."""
    note_id: Optional[str] = None
    reloaded: bool = False
    reload_error: Optional[str] = None


class DraftResult(OperationResult):
    """Outcome of a purely local draft change."""
    create_draft: Optional[NoteDraft] = None
    edit_draft: Optional[EditDraft] = None


class SessionSnapshot(BaseModel):
    """What the presentation layer sees of the session."""
    session: Session
    ready: bool


class NotesSnapshot(BaseModel):
    """What the presentation layer sees of the note collection and drafts."""
    notes: list[Note] = Field(default_factory=list)
    create_draft: Optional[NoteDraft] = None
    edit_draft: Optional[EditDraft] = None

    @property
    def active_note_id(self) -> Optional[str]:
        return self.edit_draft.note_id if self.edit_draft else None
