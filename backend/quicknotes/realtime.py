"""
Socket.IO channel pushing state snapshots to connected views.
"""

import socketio

from quicknotes.logging import get_logger
from quicknotes.services.note_sync import NoteCollectionSynchronizer
from quicknotes.services.session_manager import SessionManager

logger = get_logger('realtime')

sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*'
)


def build_state(
    session_manager: SessionManager,
    note_sync: NoteCollectionSynchronizer,
    load_error: str | None = None,
) -> dict:
    state = {
        "session": session_manager.snapshot().model_dump(mode="json"),
        "load_error": load_error,
    }
    if session_manager.is_authenticated:
        state["notes"] = note_sync.snapshot().model_dump(mode="json")
    else:
        state["notes"] = None
    return state


async def publish_state(
    session_manager: SessionManager,
    note_sync: NoteCollectionSynchronizer,
    load_error: str | None = None,
) -> None:
    await sio.emit("state", build_state(session_manager, note_sync, load_error))


@sio.event
async def connect(sid, environ):
    logger.debug(f"Client {sid[:8]}... connected")


@sio.event
async def disconnect(sid):
    logger.debug(f"Client {sid[:8]}... disconnected")
