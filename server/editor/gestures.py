"""
Selection and drag handling for the two editing surfaces.

Both views drive one gesture state held by the session:

    idle --pointer down--> dragging | panning (plan) | orbiting (scene)
    dragging/panning/orbiting --pointer up or leave--> idle

The views differ in how a drag starts. On the plan a first click selects and
a second press on the selected piece starts dragging it. In the scene a press
on a piece selects it and starts the drag in one gesture.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

from models.furniture import FurnitureResponse
from editor.instances import FurnitureInstance
from editor.transform import ViewTransform

if TYPE_CHECKING:
    from editor.session import EditorSession

# Plan view furniture size relative to the grid scale
FURNITURE_RENDER_FACTOR = 0.15
# Pixel size of the marker drawn for unresolved catalog entries
PLACEHOLDER_PX = 20.0

NUDGE_STEP = 0.5
NUDGE_FINE_STEP = 0.1
NUDGE_DIRECTIONS = {
    "ArrowUp": (0.0, -1.0),
    "ArrowDown": (0.0, 1.0),
    "ArrowLeft": (-1.0, 0.0),
    "ArrowRight": (1.0, 0.0),
}


class GestureKind(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PANNING = "panning"
    ORBITING = "orbiting"


@dataclass(frozen=True)
class Gesture:
    kind: GestureKind = GestureKind.IDLE
    instance_id: Optional[str] = None
    offset_x: float = 0.0
    offset_y: float = 0.0


IDLE = Gesture()


def plan_footprint_px(entry: Optional[FurnitureResponse],
                      transform: ViewTransform) -> Tuple[float, float]:
    if entry is None:
        return PLACEHOLDER_PX, PLACEHOLDER_PX
    factor = transform.scale * FURNITURE_RENDER_FACTOR
    return entry.size.width * factor, entry.size.depth * factor


def contains_point(instance: FurnitureInstance, entry: Optional[FurnitureResponse],
                   transform: ViewTransform, vx: float, vy: float) -> bool:
    """Whether view point (vx, vy) falls inside the instance as drawn on the plan."""
    cx, cy = transform.world_to_view(instance.position.x, instance.position.z)
    width, height = plan_footprint_px(entry, transform)
    dx, dy = vx - cx, vy - cy
    if entry is not None:
        # Undo the yaw; placeholders are drawn unrotated
        cos_a, sin_a = math.cos(instance.yaw), math.sin(instance.yaw)
        dx, dy = dx * cos_a + dy * sin_a, -dx * sin_a + dy * cos_a
    return abs(dx) <= width / 2 and abs(dy) <= height / 2


def hit_test(session: "EditorSession", vx: float, vy: float) -> Optional[str]:
    """Top-most instance under the point; later instances draw over earlier ones."""
    hit = None
    for instance in session.design.instances:
        entry = session.catalog.resolve(instance)
        if contains_point(instance, entry, session.transform, vx, vy):
            hit = instance.instance_id
    return hit


class _InputPolicy:

    def __init__(self, session: "EditorSession"):
        self.session = session

    def pointer_up(self) -> bool:
        if self.session.gesture.kind == GestureKind.IDLE:
            return False
        self.session.gesture = IDLE
        return True

    pointer_leave = pointer_up

    def key(self, key: str, fine: bool = False) -> bool:
        """Arrow-key nudge of the selected instance."""
        session = self.session
        direction = NUDGE_DIRECTIONS.get(key)
        if direction is None or session.is_viewer or session.selected_id is None:
            return False
        if session.gesture.kind == GestureKind.DRAGGING:
            return False
        step = NUDGE_FINE_STEP if fine else NUDGE_STEP
        position = session.design.get(session.selected_id).position
        session.move_instance(
            session.selected_id,
            position.x + direction[0] * step,
            position.z + direction[1] * step,
        )
        return True


class PlanInput(_InputPolicy):
    """Pointer handling for the top-down canvas."""

    def pointer_down(self, vx: float, vy: float) -> bool:
        session = self.session
        selected = session.selected_id
        if not session.is_viewer and selected is not None and hit_test(session, vx, vy) == selected:
            position = session.design.get(selected).position
            cx, cy = session.transform.world_to_view(position.x, position.z)
            session.gesture = Gesture(GestureKind.DRAGGING, selected, vx - cx, vy - cy)
        else:
            transform = session.transform
            session.gesture = Gesture(GestureKind.PANNING, None,
                                      vx - transform.pan_x, vy - transform.pan_y)
        return True

    def pointer_move(self, vx: float, vy: float) -> bool:
        session = self.session
        gesture = session.gesture
        if gesture.kind == GestureKind.DRAGGING:
            x, z = session.transform.view_to_world(vx - gesture.offset_x, vy - gesture.offset_y)
            session.move_instance(gesture.instance_id, x, z)
            return True
        if gesture.kind == GestureKind.PANNING:
            session.transform.pan_to(vx - gesture.offset_x, vy - gesture.offset_y)
            return True
        return False

    def click(self, vx: float, vy: float) -> bool:
        if self.session.is_viewer:
            return False
        self.session.select(hit_test(self.session, vx, vy))
        return True

    def wheel(self, vx: float, vy: float, delta_y: float) -> bool:
        return self.session.transform.wheel(vx, vy, delta_y)


class SceneInput(_InputPolicy):
    """Pointer handling for the 3D scene; hits arrive already raycast by the renderer."""

    def pointer_down(self, target_id: Optional[str] = None) -> bool:
        session = self.session
        if target_id is not None and not session.is_viewer:
            session.select(target_id)
            session.gesture = Gesture(GestureKind.DRAGGING, target_id)
        else:
            session.gesture = Gesture(GestureKind.ORBITING)
        return True

    def pointer_move(self, ground_x: float, ground_z: float) -> bool:
        """ground_x/ground_z: where the pointer ray meets the floor plane."""
        gesture = self.session.gesture
        if gesture.kind != GestureKind.DRAGGING:
            return False
        self.session.move_instance(gesture.instance_id, ground_x, ground_z)
        return True

    def click(self, target_id: Optional[str] = None) -> bool:
        if self.session.is_viewer or target_id is None:
            return False
        self.session.select(target_id)
        return True
