import pytest

from editor.constraints import PLACEMENT_MARGIN, clamp_position, is_within_room
from models.design import RoomSettings, Vector3


def test_position_inside_room_is_unchanged(room):
    assert clamp_position(Vector3(x=0, y=0, z=0), room) == Vector3(x=0, y=0, z=0)
    assert clamp_position(Vector3(x=-4.5, y=0, z=4.5), room) == Vector3(x=-4.5, y=0, z=4.5)


def test_drag_past_wall_stops_at_margin(room):
    clamped = clamp_position(Vector3(x=6, y=0, z=0), room)
    assert clamped.x == 10 / 2 - PLACEMENT_MARGIN == 4.5
    assert clamped.z == 0


def test_both_axes_clamp_on_negative_side(room):
    assert clamp_position(Vector3(x=-9, y=0, z=-12), room) == Vector3(x=-4.5, y=0, z=-4.5)


def test_instances_stay_on_the_floor(room):
    assert clamp_position(Vector3(x=1, y=2.5, z=1), room).y == 0


def test_rectangular_room_uses_depth_for_z():
    room = RoomSettings(width=6, depth=4, height=2.5)
    assert clamp_position(Vector3(x=10, y=0, z=10), room) == Vector3(x=2.5, y=0, z=1.5)


@pytest.mark.parametrize("width,depth", [(1.0, 10.0), (0.8, 0.6), (10.0, 0.9)])
def test_room_narrower_than_footprint_parks_on_centre_line(width, depth):
    room = RoomSettings(width=width, depth=depth)
    clamped = clamp_position(Vector3(x=3, y=0, z=-3), room)
    if width <= 2 * PLACEMENT_MARGIN:
        assert clamped.x == 0
    if depth <= 2 * PLACEMENT_MARGIN:
        assert clamped.z == 0


@pytest.mark.parametrize("room", [
    RoomSettings(width=10, depth=10),
    RoomSettings(width=3.3, depth=7.1),
    RoomSettings(width=0.5, depth=0.5),
])
def test_clamp_is_idempotent(room):
    for position in [Vector3(x=0, y=0, z=0), Vector3(x=100, y=5, z=-100),
                     Vector3(x=-1.7, y=0, z=2.2), Vector3(x=3.14, y=-1, z=0.01)]:
        once = clamp_position(position, room)
        assert clamp_position(once, room) == once
        assert is_within_room(once, room)


def test_is_within_room(room):
    assert is_within_room(Vector3(x=4.5, y=0, z=0), room)
    assert not is_within_room(Vector3(x=4.6, y=0, z=0), room)
    assert not is_within_room(Vector3(x=0, y=1, z=0), room)
