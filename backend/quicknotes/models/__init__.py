"""
Quick Notes models.

Usage:
    from quicknotes.models import Session, User, Note, NoteDraft, EditDraft
    from quicknotes.models import SessionStatus, ErrorKind, normalize_email
    from quicknotes.models import SessionResult, NotesLoaded, NoteMutation
"""

# --- Enums & utilities ---
from quicknotes.models.enums import (
    SessionStatus,
    ErrorKind,
    normalize_email,
    is_valid_email,
)

# --- Domain models ---
from quicknotes.models.domain import (
    User, Session, CodeRequest, CodeVerification,
    RemoteDocument, Note, NoteDraft, NoteDraftUpdate, EditDraft,
)

# --- Result models ---
from quicknotes.models.results import (
    RemoteResult, CodeRequested, CodeVerified, PersistedSession,
    DocumentsRead, DocumentWritten, DocumentDeleted,
    OperationResult, SessionResult, SignInResult, NotesLoaded, NoteMutation, DraftResult,
    SessionSnapshot, NotesSnapshot,
)

__all__ = [
    # Enums
    "SessionStatus", "ErrorKind", "normalize_email", "is_valid_email",
    # Domain
    "User", "Session", "CodeRequest", "CodeVerification",
    "RemoteDocument", "Note", "NoteDraft", "NoteDraftUpdate", "EditDraft",
    # Results
    "RemoteResult", "CodeRequested", "CodeVerified", "PersistedSession",
    "DocumentsRead", "DocumentWritten", "DocumentDeleted",
    "OperationResult", "SessionResult", "SignInResult", "NotesLoaded", "NoteMutation", "DraftResult",
    "SessionSnapshot", "NotesSnapshot",
]
