"""
World <-> view mapping for the 2D plan canvas.

Room-space is metres on the floor plane (x to the right, z towards the
viewer); view-space is canvas pixels with the origin top-left. The room
centre sits at the canvas centre shifted by the pan offset.
"""

from dataclasses import dataclass
from typing import Tuple

# Scale is pixels per metre
SCALE_MIN = 5.0
SCALE_MAX = 50.0
DEFAULT_SCALE = 20.0

# Wheel notch factors and button increment
WHEEL_ZOOM_OUT = 0.9
WHEEL_ZOOM_IN = 1.1
BUTTON_ZOOM_STEP = 5.0

# Space kept around the room when sizing the canvas
CANVAS_PADDING = 200.0


def clamp_scale(scale: float) -> float:
    return max(SCALE_MIN, min(SCALE_MAX, scale))


@dataclass
class ViewTransform:
    width: float = 800.0
    height: float = 600.0
    scale: float = DEFAULT_SCALE
    pan_x: float = 0.0
    pan_y: float = 0.0

    def __post_init__(self):
        self.resize(self.width, self.height)
        self.scale = clamp_scale(self.scale)

    def world_to_view(self, x: float, z: float) -> Tuple[float, float]:
        return (
            self.width / 2 + x * self.scale + self.pan_x,
            self.height / 2 + z * self.scale + self.pan_y,
        )

    def view_to_world(self, vx: float, vy: float) -> Tuple[float, float]:
        return (
            (vx - self.width / 2 - self.pan_x) / self.scale,
            (vy - self.height / 2 - self.pan_y) / self.scale,
        )

    def zoom_at(self, vx: float, vy: float, factor: float) -> bool:
        """
        Multiply the scale by factor, keeping the room-space point under
        (vx, vy) fixed on screen.

        Returns False when the clamped scale is unchanged.
        """
        new_scale = clamp_scale(self.scale * factor)
        return self._set_scale_anchored(vx, vy, new_scale)

    def wheel(self, vx: float, vy: float, delta_y: float) -> bool:
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        return self.zoom_at(vx, vy, factor)

    def zoom_in(self) -> bool:
        return self._set_scale_anchored(
            self.width / 2, self.height / 2, clamp_scale(self.scale + BUTTON_ZOOM_STEP)
        )

    def zoom_out(self) -> bool:
        return self._set_scale_anchored(
            self.width / 2, self.height / 2, clamp_scale(self.scale - BUTTON_ZOOM_STEP)
        )

    def _set_scale_anchored(self, vx: float, vy: float, new_scale: float) -> bool:
        if new_scale == self.scale:
            return False
        world_x, world_z = self.view_to_world(vx, vy)
        self.scale = new_scale
        self.pan_x = vx - (self.width / 2 + world_x * new_scale)
        self.pan_y = vy - (self.height / 2 + world_z * new_scale)
        return True

    def pan_to(self, pan_x: float, pan_y: float):
        self.pan_x = pan_x
        self.pan_y = pan_y

    def reset_pan(self):
        self.pan_to(0.0, 0.0)

    def reset_zoom(self):
        self.scale = DEFAULT_SCALE
        self.reset_pan()

    def resize(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must be positive, got {width}x{height}")
        self.width = float(width)
        self.height = float(height)

    @property
    def zoom_percent(self) -> int:
        return round(self.scale / DEFAULT_SCALE * 100)


def canvas_size_for_room(container_width: float, container_height: float,
                         room_width: float, room_depth: float,
                         scale: float) -> Tuple[float, float]:
    """Canvas size that fits the room plus padding and follows its aspect ratio."""
    room_width_px = room_width * scale
    room_depth_px = room_depth * scale

    canvas_width = max(room_width_px + CANVAS_PADDING * 2, container_width)
    canvas_height = max(room_depth_px + CANVAS_PADDING * 2, container_height)

    room_aspect = room_width_px / room_depth_px
    if canvas_width / canvas_height > room_aspect:
        canvas_height = canvas_width / room_aspect
    else:
        canvas_width = canvas_height * room_aspect

    return canvas_width, canvas_height
