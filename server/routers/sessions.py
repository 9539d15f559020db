"""
Editor sessions: one shared design per open editor, driven by input events.

The client forwards pointer, wheel and key events from whichever surface is
active; the session applies them through the same placement rules and
publishes every design change on the SSE channel so the other surface and
other viewers re-render.

Session routes are coroutines, so every mutation of a session runs on the
event loop one request at a time. Only the DuckDB write of a save is handed
to the threadpool, and it works on a snapshot taken on the loop.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import asdict
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from config import SESSION_IDLE_TIMEOUT
from events import publish
from identity import Identity, get_identity
from models.design import DesignUpdate, RoomSettingsUpdate
from models.session import (
    AddFurnitureRequest, DetailsRequest, EventResult, InputEvent, InstanceState,
    PanRequest, SelectRequest, SessionCreate, SessionState, ViewModeRequest,
    ViewportRequest, ViewState,
)
from editor.design import DesignState, UnknownInstanceError
from editor.instances import CatalogSnapshot
from editor.render import render_plan, render_scene
from editor.session import EditorSession, ReadOnlySessionError, UnknownModelError, ViewMode
from editor.transform import ViewTransform
from routers.designs import fetch_design, load_design, write_design
from routers.furniture import list_catalog_entries

logger = logging.getLogger(__name__)

router = APIRouter()

# Open sessions by id
_sessions: Dict[str, EditorSession] = {}


def evict_idle_sessions(now: Optional[float] = None) -> int:
    """Close sessions untouched for longer than SESSION_IDLE_TIMEOUT."""
    now = time.monotonic() if now is None else now
    idle = [sid for sid, s in _sessions.items() if now - s.last_active > SESSION_IDLE_TIMEOUT]
    for sid in idle:
        session = _sessions.pop(sid)
        session.close()
        logger.info(f"Session {sid} evicted after {SESSION_IDLE_TIMEOUT:.0f}s idle")
    return len(idle)


def get_session(session_id: str) -> EditorSession:
    evict_idle_sessions()
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    session.touch()
    return session


async def controlled_session(session_id: str, identity: Identity = Depends(get_identity)) -> EditorSession:
    """The session, if the caller is the user who opened it or an admin."""
    session = get_session(session_id)
    if not identity.is_admin and identity.user_id != session.opened_by:
        raise HTTPException(403, "Session belongs to another user")
    return session


@contextmanager
def session_errors():
    """Translate editor errors into HTTP responses."""
    try:
        yield
    except ReadOnlySessionError as e:
        raise HTTPException(403, str(e))
    except UnknownInstanceError as e:
        raise HTTPException(404, f"Furniture instance {e.args[0]} not found")
    except UnknownModelError as e:
        raise HTTPException(404, f"Catalog entry {e.args[0]} not found")


def session_state(session: EditorSession) -> SessionState:
    furniture = []
    for index, instance in enumerate(session.design.instances):
        entry = session.catalog.resolve(instance)
        furniture.append(InstanceState(
            instanceId=instance.instance_id,
            index=index,
            modelId=instance.model_id,
            name=entry.name if entry is not None else None,
            resolved=entry is not None,
            position=instance.position,
            rotation=instance.rotation,
            scale=instance.scale,
        ))
    transform = session.transform
    return SessionState(
        id=session.id,
        designId=session.design.design_id,
        name=session.design.name,
        isPublic=session.design.is_public,
        isViewer=session.is_viewer,
        viewMode=session.view_mode.value,
        room=session.design.room,
        furniture=furniture,
        selectedId=session.selected_id,
        selectedIndex=session.selected_index,
        gesture=session.gesture.kind.value,
        view=ViewState(
            scale=transform.scale,
            panX=transform.pan_x,
            panY=transform.pan_y,
            width=transform.width,
            height=transform.height,
            zoomPercent=transform.zoom_percent,
        ),
        revision=session.revision,
        dirty=session.dirty,
        saveStatus=session.save_status.value,
        saveError=session.save_error,
    )


def _publish_change(session: EditorSession, change: str):
    publish("design_updated", {
        "id": session.design.design_id,
        "sessionId": session.id,
        "change": change,
        "revision": session.revision,
    })


def _require(value, name: str):
    if value is None:
        raise HTTPException(422, f"Event is missing {name}")
    return value


def apply_event(session: EditorSession, event: InputEvent) -> bool:
    policy = session.input
    if event.type in ("pointerUp", "pointerLeave"):
        return policy.pointer_up()
    if event.type == "key":
        return policy.key(_require(event.key, "key"), event.shiftKey)

    if session.view_mode == ViewMode.PLAN:
        x, y = _require(event.x, "x"), _require(event.y, "y")
        if event.type == "pointerDown":
            return policy.pointer_down(x, y)
        if event.type == "pointerMove":
            return policy.pointer_move(x, y)
        if event.type == "click":
            return policy.click(x, y)
        return policy.wheel(x, y, event.deltaY)

    if event.type == "pointerDown":
        return policy.pointer_down(event.targetId)
    if event.type == "pointerMove":
        if event.groundX is None or event.groundZ is None:
            return False
        return policy.pointer_move(event.groundX, event.groundZ)
    if event.type == "click":
        return policy.click(event.targetId)
    # Scene zoom belongs to the camera controls
    return False


def _write_if_present(design_id: str, update: DesignUpdate):
    if fetch_design(design_id) is None:
        raise LookupError(f"Room design {design_id} no longer exists")
    write_design(design_id, update)


async def persist_design(design_id: str, update: DesignUpdate):
    await run_in_threadpool(_write_if_present, design_id, update)


@router.post("/", response_model=SessionState, status_code=201)
async def open_session(request: SessionCreate, identity: Identity = Depends(get_identity)):
    evict_idle_sessions()
    design = load_design(request.designId)
    is_viewer = request.isViewer
    if not identity.can_edit(design.createdBy):
        if not design.isPublic:
            raise HTTPException(403, "Access denied")
        is_viewer = True

    session = EditorSession(
        DesignState.from_response(design),
        CatalogSnapshot(list_catalog_entries()),
        is_viewer=is_viewer,
        view_mode=ViewMode(request.viewMode),
        transform=ViewTransform(width=request.viewportWidth, height=request.viewportHeight),
        opened_by=identity.user_id,
    )
    session.subscribe(_publish_change)
    _sessions[session.id] = session
    logger.info(f"Session {session.id} opened on design {design.id} by {identity.user_id} (viewer={is_viewer})")
    return session_state(session)


@router.get("/{session_id}", response_model=SessionState)
async def get_session_state(session: EditorSession = Depends(controlled_session)):
    return session_state(session)


@router.delete("/{session_id}")
async def close_session(session: EditorSession = Depends(controlled_session)):
    session.close()
    _sessions.pop(session.id, None)
    return {"status": "closed"}


@router.post("/{session_id}/events", response_model=EventResult)
async def post_event(event: InputEvent, session: EditorSession = Depends(controlled_session)):
    with session_errors():
        handled = apply_event(session, event)
    return EventResult(handled=handled, state=session_state(session))


@router.post("/{session_id}/furniture", response_model=SessionState, status_code=201)
async def add_furniture(request: AddFurnitureRequest,
                        session: EditorSession = Depends(controlled_session)):
    with session_errors():
        session.add_furniture(request.modelId, request.position, request.rotation, request.scale)
    return session_state(session)


@router.put("/{session_id}/selection", response_model=SessionState)
async def select_furniture(request: SelectRequest, session: EditorSession = Depends(controlled_session)):
    with session_errors():
        session.select(request.instanceId)
    return session_state(session)


@router.delete("/{session_id}/selection", response_model=SessionState)
async def delete_selected(session: EditorSession = Depends(controlled_session)):
    with session_errors():
        session.delete_selected()
    return session_state(session)


@router.post("/{session_id}/rotate", response_model=SessionState)
async def rotate_selected(session: EditorSession = Depends(controlled_session)):
    with session_errors():
        session.rotate_selected()
    return session_state(session)


@router.put("/{session_id}/room", response_model=SessionState)
async def update_room(settings: RoomSettingsUpdate, session: EditorSession = Depends(controlled_session)):
    with session_errors():
        session.update_room(settings)
    return session_state(session)


@router.put("/{session_id}/details", response_model=SessionState)
async def update_details(request: DetailsRequest, session: EditorSession = Depends(controlled_session)):
    with session_errors():
        session.update_details(request.name, request.isPublic)
    return session_state(session)


@router.put("/{session_id}/view-mode", response_model=SessionState)
async def set_view_mode(request: ViewModeRequest, session: EditorSession = Depends(controlled_session)):
    session.set_view_mode(ViewMode(request.viewMode))
    return session_state(session)


@router.put("/{session_id}/viewport", response_model=SessionState)
async def resize_viewport(request: ViewportRequest, session: EditorSession = Depends(controlled_session)):
    session.transform.resize(request.width, request.height)
    return session_state(session)


@router.put("/{session_id}/pan", response_model=SessionState)
async def set_pan(request: PanRequest, session: EditorSession = Depends(controlled_session)):
    session.transform.pan_to(request.x, request.y)
    return session_state(session)


@router.post("/{session_id}/zoom-in", response_model=SessionState)
async def zoom_in(session: EditorSession = Depends(controlled_session)):
    session.transform.zoom_in()
    return session_state(session)


@router.post("/{session_id}/zoom-out", response_model=SessionState)
async def zoom_out(session: EditorSession = Depends(controlled_session)):
    session.transform.zoom_out()
    return session_state(session)


@router.post("/{session_id}/reset-pan", response_model=SessionState)
async def reset_pan(session: EditorSession = Depends(controlled_session)):
    session.transform.reset_pan()
    return session_state(session)


@router.post("/{session_id}/reset-zoom", response_model=SessionState)
async def reset_zoom(session: EditorSession = Depends(controlled_session)):
    session.transform.reset_zoom()
    return session_state(session)


@router.get("/{session_id}/render/plan")
async def get_plan_frame(session: EditorSession = Depends(controlled_session)):
    return asdict(render_plan(session))


@router.get("/{session_id}/render/scene")
async def get_scene_frame(session: EditorSession = Depends(controlled_session)):
    return asdict(render_scene(session))


@router.post("/{session_id}/save")
async def save_session(background_tasks: BackgroundTasks,
                       session: EditorSession = Depends(controlled_session)):
    """
    Save the session's design.

    The write happens in the background; poll GET /sessions/{id} for
    saveStatus. A failed save keeps every edit so it can be retried.
    """
    if session.is_viewer:
        raise HTTPException(403, "Viewer sessions cannot save")
    background_tasks.add_task(session.save, persist_design)
    return {"status": "saving", "revision": session.revision}
