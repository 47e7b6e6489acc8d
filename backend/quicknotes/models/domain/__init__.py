"""Domain models for the session and the notes it gives access to."""

from quicknotes.models.domain.session import (
    User,
    Session,
    CodeRequest,
    CodeVerification,
)
from quicknotes.models.domain.note import (
    RemoteDocument,
    Note,
    NoteDraft,
    NoteDraftUpdate,
    EditDraft,
)

__all__ = [
    "User", "Session", "CodeRequest", "CodeVerification",
    "RemoteDocument", "Note", "NoteDraft", "NoteDraftUpdate", "EditDraft",
]
