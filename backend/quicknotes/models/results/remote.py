"""
Result models for identity and document-store calls.
"""

from pydantic import BaseModel, Field
from typing import Optional

from quicknotes.models.domain import RemoteDocument, User


class RemoteResult(BaseModel):
    """Base result for remote collaborator calls."""
    success: bool
    error: Optional[str] = None


class CodeRequested(RemoteResult):
    """Result of asking for a login code to be sent."""
    pass


class CodeVerified(RemoteResult):
    """Result of exchanging a login code for a session."""
    user: Optional[User] = None


class PersistedSession(RemoteResult):
    """Result of looking up a previously stored session; ``user`` is None if there is none."""
    user: Optional[User] = None


class DocumentsRead(RemoteResult):
    """Result of reading every document in a collection."""
    documents: list[RemoteDocument] = Field(default_factory=list)


class DocumentWritten(RemoteResult):
    """Result of creating or updating a document."""
    document: Optional[RemoteDocument] = None


class DocumentDeleted(RemoteResult):
    """Result of deleting a document."""
    pass
