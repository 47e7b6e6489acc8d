"""Result models for remote calls and core operations."""

from quicknotes.models.results.remote import (
    RemoteResult, CodeRequested, CodeVerified, PersistedSession,
    DocumentsRead, DocumentWritten, DocumentDeleted,
)
from quicknotes.models.results.core import (
    OperationResult, SessionResult, SignInResult, NotesLoaded, NoteMutation, DraftResult,
    SessionSnapshot, NotesSnapshot,
)

__all__ = [
    "RemoteResult", "CodeRequested", "CodeVerified", "PersistedSession",
    "DocumentsRead", "DocumentWritten", "DocumentDeleted",
    "OperationResult", "SessionResult", "SignInResult", "NotesLoaded", "NoteMutation", "DraftResult",
    "SessionSnapshot", "NotesSnapshot",
]
