"""
Dependency injection for FastAPI routes.

Provides typed access to the process-wide session manager and note synchronizer.
"""

from typing import Annotated
from fastapi import Request, Depends

from quicknotes.services.note_sync import NoteCollectionSynchronizer
from quicknotes.services.session_manager import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_note_sync(request: Request) -> NoteCollectionSynchronizer:
    return request.app.state.note_sync


SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
NoteSyncDep = Annotated[NoteCollectionSynchronizer, Depends(get_note_sync)]
