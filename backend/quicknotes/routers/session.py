"""Session routes."""

from fastapi import APIRouter

from quicknotes.dependencies import NoteSyncDep, SessionManagerDep
from quicknotes.models import CodeRequest, CodeVerification, SessionResult, SessionSnapshot, SignInResult
from quicknotes.realtime import publish_state
from quicknotes.routers.errors import raise_for_failure

router = APIRouter()


@router.get("", response_model=SessionSnapshot)
async def get_session(manager: SessionManagerDep):
    return manager.snapshot()


@router.post("/code", response_model=SessionResult)
async def request_code(body: CodeRequest, manager: SessionManagerDep, notes: NoteSyncDep):
    result = await manager.request_code(body.email)
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.post("/verify", response_model=SignInResult)
async def verify_code(body: CodeVerification, manager: SessionManagerDep, notes: NoteSyncDep):
    result = await manager.verify_code(body.email, body.code)
    raise_for_failure(result)
    response = SignInResult(**dict(result))
    if result.established:
        # The sign-in stands even when the initial load fails; the view can retry it.
        loaded = await notes.load()
        response.notes_loaded = loaded.success
        response.load_error = loaded.error
    await publish_state(manager, notes, load_error=response.load_error)
    return response


@router.post("/cancel", response_model=SessionResult)
async def cancel_pending(manager: SessionManagerDep, notes: NoteSyncDep):
    result = await manager.cancel_pending()
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.post("/logout", response_model=SessionResult)
async def logout(manager: SessionManagerDep, notes: NoteSyncDep):
    result = await manager.logout()
    notes.reset()
    await publish_state(manager, notes)
    raise_for_failure(result)
    return result
