"""
Frame descriptions for the plan canvas and the 3D scene.

Both are pure reads of the session state, so rendering the same state twice
yields equal frames.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from editor.gestures import plan_footprint_px
from editor.instances import footprint
from editor.transform import canvas_size_for_room

SELECTED_FILL = "#ff6b6b"
FURNITURE_FILL = "#4ecdc4"
PLACEHOLDER_FILL = "#999999"
UNKNOWN_LABEL = "Unknown"

# Extra grid cells drawn past the room on the plan, and past the floor in 3D
PLAN_GRID_MARGIN = 4
SCENE_GRID_MARGIN = 5

CAMERA_FOV = 60.0
SELECTION_RING_FACTOR = 0.6


@dataclass(frozen=True)
class PlanShape:
    instance_id: str
    index: int
    x: float
    y: float
    width: float
    height: float
    rotation: float
    label: str
    fill: str
    selected: bool
    placeholder: bool


@dataclass(frozen=True)
class PlanFrame:
    width: float
    height: float
    scale: float
    zoom_percent: int
    canvas_size: Tuple[float, float]
    floor_color: str
    grid_color: str
    room_rect: Tuple[float, float, float, float]
    grid_x: Tuple[float, ...]
    grid_y: Tuple[float, ...]
    axes: Tuple[float, float]
    shapes: Tuple[PlanShape, ...]


@dataclass(frozen=True)
class SceneNode:
    instance_id: str
    index: int
    model_url: Optional[str]
    position: Tuple[float, float, float]
    rotation: Tuple[float, float, float]
    scale: Tuple[float, float, float]
    box_size: Tuple[float, float, float]
    selected: bool
    placeholder: bool
    ring_radius: Optional[float]


@dataclass(frozen=True)
class SceneFrame:
    camera_position: Tuple[float, float, float]
    camera_fov: float
    min_distance: float
    max_distance: float
    grid_size: Tuple[float, float]
    room: Tuple[float, float, float]
    wall_color: str
    floor_color: str
    ceiling_color: str
    nodes: Tuple[SceneNode, ...]


def grid_color(floor_color: str) -> str:
    if floor_color == "#ffffff":
        return "#e0e0e0"
    if floor_color == "#000000":
        return "#333333"
    return floor_color + "80"


def render_plan(session) -> PlanFrame:
    transform = session.transform
    room = session.design.room
    scale = transform.scale

    room_w = room.width * scale
    room_h = room.depth * scale
    left, top = transform.world_to_view(-room.width / 2, -room.depth / 2)

    grid_range = int(math.ceil(max(room.width, room.depth))) + PLAN_GRID_MARGIN
    origin_x, origin_y = transform.world_to_view(0.0, 0.0)
    grid_x = tuple(origin_x + i * scale for i in range(-grid_range, grid_range + 1)
                   if 0 <= origin_x + i * scale <= transform.width)
    grid_y = tuple(origin_y + i * scale for i in range(-grid_range, grid_range + 1)
                   if 0 <= origin_y + i * scale <= transform.height)

    shapes = []
    for index, instance in enumerate(session.design.instances):
        entry = session.catalog.resolve(instance)
        selected = instance.instance_id == session.selected_id
        x, y = transform.world_to_view(instance.position.x, instance.position.z)
        width, height = plan_footprint_px(entry, transform)
        if entry is None:
            fill = SELECTED_FILL if selected else PLACEHOLDER_FILL
        else:
            fill = SELECTED_FILL if selected else FURNITURE_FILL
        shapes.append(PlanShape(
            instance_id=instance.instance_id,
            index=index,
            x=x,
            y=y,
            width=width,
            height=height,
            rotation=instance.yaw if entry is not None else 0.0,
            label=entry.name if entry is not None else UNKNOWN_LABEL,
            fill=fill,
            selected=selected,
            placeholder=entry is None,
        ))

    return PlanFrame(
        width=transform.width,
        height=transform.height,
        scale=scale,
        zoom_percent=transform.zoom_percent,
        canvas_size=canvas_size_for_room(transform.width, transform.height,
                                         room.width, room.depth, scale),
        floor_color=room.floorColor,
        grid_color=grid_color(room.floorColor),
        room_rect=(left, top, room_w, room_h),
        grid_x=grid_x,
        grid_y=grid_y,
        axes=(origin_x, origin_y),
        shapes=tuple(shapes),
    )


def camera_position(width: float, depth: float, height: float) -> Tuple[float, float, float]:
    distance = max(10.0, max(width, depth, height) * 1.5)
    return (distance, distance * 0.6, distance)


def render_scene(session) -> SceneFrame:
    room = session.design.room
    show_selection = not session.is_viewer

    nodes = []
    for index, instance in enumerate(session.design.instances):
        entry = session.catalog.resolve(instance)
        width, depth, height = footprint(entry)
        selected = instance.instance_id == session.selected_id
        nodes.append(SceneNode(
            instance_id=instance.instance_id,
            index=index,
            model_url=entry.modelUrl if entry is not None else None,
            position=(instance.position.x, instance.position.y, instance.position.z),
            rotation=(instance.rotation.x, instance.rotation.y, instance.rotation.z),
            scale=(instance.scale.x, instance.scale.y, instance.scale.z),
            box_size=(width, height, depth),
            selected=selected,
            placeholder=entry is None,
            ring_radius=max(width, depth) * SELECTION_RING_FACTOR if selected and show_selection else None,
        ))

    return SceneFrame(
        camera_position=camera_position(room.width, room.depth, room.height),
        camera_fov=CAMERA_FOV,
        min_distance=max(5.0, min(room.width, room.depth) * 0.8),
        max_distance=max(50.0, max(room.width, room.depth) * 3),
        grid_size=(room.width + SCENE_GRID_MARGIN, room.depth + SCENE_GRID_MARGIN),
        room=(room.width, room.depth, room.height),
        wall_color=room.wallColor,
        floor_color=room.floorColor,
        ceiling_color=room.ceilingColor,
        nodes=tuple(nodes),
    )
