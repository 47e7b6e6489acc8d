"""
Quick Notes - local FastAPI surface over the session and note sync core.

Run with: uvicorn quicknotes.app:create_asgi_app --factory
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio

from quicknotes.config import settings
from quicknotes.database.db import init_db
from quicknotes.logging import setup_logging, get_logger
from quicknotes.realtime import sio
from quicknotes.routers import notes, session
from quicknotes.services.document_store import DocumentStoreService
from quicknotes.services.identity import IdentityService
from quicknotes.services.note_sync import NoteCollectionSynchronizer
from quicknotes.services.session_manager import SessionManager
from quicknotes.services.session_store import SessionStore

logger = get_logger('main')


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.DEBUG)
    logger.info("Starting Quick Notes client")

    await init_db(settings.SESSION_DB_PATH)
    logger.info("Session database initialized")

    # Initialize collaborators
    store = SessionStore(settings.SESSION_DB_PATH)
    identity = IdentityService(
        base_url=settings.API_BASE_URL,
        store=store,
        api_key=settings.API_KEY,
    )
    await identity.initialize()
    documents = DocumentStoreService(
        base_url=settings.API_BASE_URL,
        api_key=settings.API_KEY,
        token_provider=store.get_access_token,
    )
    await documents.initialize()

    app.state.session_manager = SessionManager(identity)
    app.state.note_sync = NoteCollectionSynchronizer(
        store=documents,
        session=app.state.session_manager,
        collection=settings.NOTES_COLLECTION,
    )
    logger.info("Services initialized")

    restored = await app.state.session_manager.restore()
    if restored.established:
        loaded = await app.state.note_sync.load()
        if not loaded.success:
            logger.warning(f"Initial note load failed: {loaded.error}")
    elif not restored.success:
        logger.warning(f"Session restore failed: {restored.error}")

    yield

    logger.info("Shutting down client")
    await identity.close()
    await documents.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Quick Notes",
        description="Personal cloud notes behind a passwordless login",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session.router, prefix="/api/session", tags=["Session"])
    app.include_router(notes.router, prefix="/api/notes", tags=["Notes"])

    @app.get("/health")
    async def health_check():
        manager = getattr(app.state, "session_manager", None)
        return {
            "status": "healthy",
            "service": "quicknotes",
            "ready": manager.ready if manager else False,
            "authenticated": manager.is_authenticated if manager else False,
        }

    return app


def create_asgi_app() -> socketio.ASGIApp:
    return socketio.ASGIApp(sio, other_asgi_app=create_app())
