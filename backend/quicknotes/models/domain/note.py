"""Note domain model."""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime


class RemoteDocument(BaseModel):
    """A raw document as returned by the document store."""
    id: str
    data: dict[str, Any] = Field(default_factory=dict)


class Note(BaseModel):
    """A cached, read-only copy of a note held by the remote store."""
    id: str
    title: str
    content: str = ""
    created_at: Optional[datetime] = None

    model_config = {"frozen": True}


class NoteDraft(BaseModel):
    """Unsaved input for a note being composed."""
    title: str = ""
    content: str = ""


class NoteDraftUpdate(BaseModel):
    """Partial change to a draft; ``None`` leaves a field as it is."""
    title: Optional[str] = None
    content: Optional[str] = None


class EditDraft(BaseModel):
    """Unsaved edits to an existing note."""
    note_id: str
    title: str
    content: str = ""
