"""
Editing session: the one copy of a design both views read and mutate.

A session is created when an editor opens a design and closed when the user
navigates away. Mutations go through the methods below so that every input
path is clamped the same way and every subscriber sees the change.
"""

import math
import time
import uuid
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

import httpx

import api_client
from models.design import DesignUpdate, RoomSettingsUpdate, Vector3
from editor.constraints import clamp_position
from editor.design import DesignState
from editor.gestures import IDLE, GestureKind, PlanInput, SceneInput
from editor.instances import CatalogSnapshot, FurnitureInstance, normalize_scale
from editor.transform import ViewTransform

logger = logging.getLogger(__name__)

QUARTER_TURN = math.pi / 2
FULL_TURN = 2 * math.pi

Listener = Callable[["EditorSession", str], None]
Persist = Callable[[str, DesignUpdate], Awaitable[object]]


class ViewMode(str, Enum):
    PLAN = "2d"
    SCENE = "3d"


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    FAILED = "failed"


class ReadOnlySessionError(Exception):
    """Mutation attempted in a viewer session."""
    pass


class UnknownModelError(KeyError):
    """Catalog has no entry with this id."""
    pass


class EditorSession:

    def __init__(self, design: DesignState, catalog: CatalogSnapshot,
                 is_viewer: bool = False, view_mode: ViewMode = ViewMode.PLAN,
                 transform: Optional[ViewTransform] = None,
                 session_id: Optional[str] = None, opened_by: Optional[str] = None):
        self.id = session_id or str(uuid.uuid4())
        self.opened_by = opened_by
        self.last_active = time.monotonic()
        self.design = design
        self.catalog = catalog
        self.is_viewer = is_viewer
        self.view_mode = ViewMode(view_mode)
        self.transform = transform or ViewTransform()
        self.selected_id: Optional[str] = None
        self.gesture = IDLE
        self.revision = 0
        self.saved_revision = 0
        self.save_status = SaveStatus.IDLE
        self.save_error: Optional[str] = None
        self.plan_input = PlanInput(self)
        self.scene_input = SceneInput(self)
        self._listeners: List[Listener] = []

    def touch(self):
        self.last_active = time.monotonic()

    @property
    def input(self):
        return self.plan_input if self.view_mode == ViewMode.PLAN else self.scene_input

    @property
    def selected_index(self) -> Optional[int]:
        if self.selected_id is None:
            return None
        return self.design.index_of(self.selected_id)

    @property
    def selected(self) -> Optional[FurnitureInstance]:
        if self.selected_id is None:
            return None
        return self.design.get(self.selected_id)

    @property
    def dirty(self) -> bool:
        return self.revision != self.saved_revision

    # ============ Change notification ============

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self, change: str):
        self.revision += 1
        for listener in list(self._listeners):
            listener(self, change)

    def _require_editable(self):
        if self.is_viewer:
            raise ReadOnlySessionError(f"Session {self.id} is read-only")

    # ============ Selection ============

    def select(self, instance_id: Optional[str]):
        self._require_editable()
        if instance_id is not None:
            self.design.index_of(instance_id)
        if instance_id == self.selected_id:
            return
        self.selected_id = instance_id
        self._changed("selection")

    # ============ Furniture edits ============

    def add_furniture(self, model_id: str, position: Optional[Vector3] = None,
                      rotation: Optional[Vector3] = None, scale=1.0) -> FurnitureInstance:
        self._require_editable()
        if model_id not in self.catalog:
            raise UnknownModelError(model_id)
        instance = FurnitureInstance(
            model_id=model_id,
            position=clamp_position(position or Vector3(), self.design.room),
            rotation=rotation or Vector3(),
            scale=normalize_scale(scale),
        )
        self.design.append(instance)
        self._changed("furniture_added")
        return instance

    def move_instance(self, instance_id: str, x: float, z: float) -> Vector3:
        """Move an instance to a proposed floor position, clamped to the room."""
        self._require_editable()
        instance = self.design.get(instance_id)
        position = clamp_position(Vector3(x=x, y=0.0, z=z), self.design.room)
        if position != instance.position:
            instance.position = position
            self._changed("furniture_moved")
        return position

    def rotate_selected(self) -> Optional[FurnitureInstance]:
        self._require_editable()
        instance = self.selected
        if instance is None:
            return None
        yaw = (instance.yaw + QUARTER_TURN) % FULL_TURN
        instance.rotation = instance.rotation.model_copy(update={"y": yaw})
        self._changed("furniture_rotated")
        return instance

    def remove_instance(self, instance_id: str) -> FurnitureInstance:
        self._require_editable()
        removed = self.design.remove(instance_id)
        if self.selected_id == instance_id:
            self.selected_id = None
        if self.gesture.instance_id == instance_id:
            self.gesture = IDLE
        self._changed("furniture_removed")
        return removed

    def delete_selected(self) -> Optional[FurnitureInstance]:
        self._require_editable()
        if self.selected_id is None:
            return None
        return self.remove_instance(self.selected_id)

    # ============ Design settings ============

    def update_room(self, settings: RoomSettingsUpdate):
        """Apply room settings and pull every instance back inside the new walls."""
        self._require_editable()
        updates = settings.model_dump(exclude_none=True)
        if not updates:
            return
        self.design.room = self.design.room.model_copy(update=updates)
        for instance in self.design.instances:
            instance.position = clamp_position(instance.position, self.design.room)
        self._changed("room_updated")

    def update_details(self, name: Optional[str] = None, is_public: Optional[bool] = None):
        self._require_editable()
        if name is not None:
            self.design.name = name
        if is_public is not None:
            self.design.is_public = is_public
        self._changed("details_updated")

    def set_view_mode(self, mode: ViewMode):
        """Switch surface. Selection and transforms carry over untouched."""
        mode = ViewMode(mode)
        if mode == self.view_mode:
            return
        if self.gesture.kind != GestureKind.IDLE:
            self.gesture = IDLE
        self.view_mode = mode

    # ============ Persistence ============

    async def save(self, persist: Persist) -> bool:
        """
        Write the design through persist(design_id, update).

        Failures are recorded on the session; in-memory edits are kept so the
        save can be retried.
        """
        self._require_editable()
        if self.design.design_id is None:
            raise ValueError("Design has no id to save under")

        revision = self.revision
        self.save_status = SaveStatus.SAVING
        self.save_error = None
        try:
            await persist(self.design.design_id, self.design.to_update())
        except Exception as e:
            logger.error(f"Saving design {self.design.design_id} failed: {e}")
            self.save_status = SaveStatus.FAILED
            self.save_error = str(e)
            return False

        self.saved_revision = revision
        self.save_status = SaveStatus.SAVED
        logger.info(f"Design {self.design.design_id} saved at revision {revision}")
        return True

    def close(self):
        self._listeners.clear()
        self.gesture = IDLE
        logger.info(f"Session {self.id} closed (unsaved changes: {self.dirty})")


async def open_remote_session(design_id: str, user_id: Optional[str] = None,
                              is_viewer: bool = False,
                              client: Optional[httpx.AsyncClient] = None) -> EditorSession:
    """Build a session from a running server's catalog and design."""
    entries = await api_client.list_catalog_entries(client=client)
    design = await api_client.load_design(design_id, user_id=user_id, client=client)
    session = EditorSession(DesignState.from_response(design), CatalogSnapshot(entries),
                            is_viewer=is_viewer)
    logger.info(f"Opened remote session {session.id} for design {design_id}")
    return session


def remote_persist(user_id: str, client: Optional[httpx.AsyncClient] = None) -> Persist:
    async def persist(design_id: str, update: DesignUpdate):
        return await api_client.save_design(design_id, update, user_id=user_id, client=client)
    return persist
