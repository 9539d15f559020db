"""
Placement constraints shared by every input path that moves furniture.
"""

from models.design import RoomSettings, Vector3

# Half-footprint kept between an instance's origin and the walls
PLACEMENT_MARGIN = 0.5


def _clamp_axis(value: float, extent: float, margin: float) -> float:
    low = -extent / 2 + margin
    high = extent / 2 - margin
    if high < low:
        # Room narrower than the footprint: park on the centre line
        return 0.0
    return max(low, min(high, value))


def clamp_position(position: Vector3, room: RoomSettings,
                   margin: float = PLACEMENT_MARGIN) -> Vector3:
    """Keep position on the floor and inside the room's walkable area."""
    return Vector3(
        x=_clamp_axis(position.x, room.width, margin),
        y=0.0,
        z=_clamp_axis(position.z, room.depth, margin),
    )


def is_within_room(position: Vector3, room: RoomSettings,
                   margin: float = PLACEMENT_MARGIN) -> bool:
    return clamp_position(position, room, margin) == position
