"""Note routes."""

from typing import Optional

from fastapi import APIRouter

from quicknotes.dependencies import NoteSyncDep, SessionManagerDep
from quicknotes.models import DraftResult, NoteDraft, NoteDraftUpdate, NoteMutation, NotesLoaded, NotesSnapshot
from quicknotes.realtime import publish_state
from quicknotes.routers.errors import raise_for_failure

router = APIRouter()


@router.get("", response_model=NotesSnapshot)
async def get_notes(notes: NoteSyncDep):
    return notes.snapshot()


@router.post("/load", response_model=NotesLoaded)
async def load_notes(notes: NoteSyncDep, manager: SessionManagerDep):
    result = await notes.load()
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.post("", response_model=NoteMutation, status_code=201)
async def create_note(notes: NoteSyncDep, manager: SessionManagerDep, body: Optional[NoteDraft] = None):
    result = await notes.create(body)
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


# ── Create draft ──
# Drafts live under a two-segment prefix so no note id can shadow them.

@router.post("/drafts/create", response_model=DraftResult)
async def begin_create(notes: NoteSyncDep, manager: SessionManagerDep, body: Optional[NoteDraft] = None):
    result = notes.begin_create(body)
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.patch("/drafts/create", response_model=DraftResult)
async def update_create_draft(body: NoteDraftUpdate, notes: NoteSyncDep, manager: SessionManagerDep):
    result = notes.update_create_draft(body)
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.delete("/drafts/create", response_model=DraftResult)
async def cancel_create(notes: NoteSyncDep, manager: SessionManagerDep):
    result = notes.cancel_create()
    await publish_state(manager, notes)
    return result


# ── Edit draft ──

@router.patch("/drafts/edit", response_model=DraftResult)
async def update_edit_draft(body: NoteDraftUpdate, notes: NoteSyncDep, manager: SessionManagerDep):
    result = notes.update_edit_draft(body)
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.post("/drafts/edit/commit", response_model=NoteMutation)
async def commit_edit(notes: NoteSyncDep, manager: SessionManagerDep):
    result = await notes.commit_edit()
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.delete("/drafts/edit", response_model=DraftResult)
async def cancel_edit(notes: NoteSyncDep, manager: SessionManagerDep):
    result = notes.cancel_edit()
    await publish_state(manager, notes)
    return result


@router.post("/{note_id}/edit", response_model=DraftResult)
async def begin_edit(note_id: str, notes: NoteSyncDep, manager: SessionManagerDep):
    result = notes.begin_edit(note_id)
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result


@router.delete("/{note_id}", response_model=NoteMutation)
async def delete_note(note_id: str, notes: NoteSyncDep, manager: SessionManagerDep):
    result = await notes.delete(note_id)
    raise_for_failure(result)
    await publish_state(manager, notes)
    return result
