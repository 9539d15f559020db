import pytest

from editor.transform import (
    DEFAULT_SCALE, SCALE_MAX, SCALE_MIN, ViewTransform, canvas_size_for_room,
)


@pytest.mark.parametrize("scale,pan,viewport", [
    (20.0, (0.0, 0.0), (800, 600)),
    (5.0, (-140.5, 33.25), (1024, 768)),
    (50.0, (12.0, -300.0), (320, 240)),
    (13.7, (0.1, 0.2), (1, 1)),
])
def test_round_trip(scale, pan, viewport):
    transform = ViewTransform(width=viewport[0], height=viewport[1], scale=scale,
                              pan_x=pan[0], pan_y=pan[1])
    for x, z in [(0.0, 0.0), (4.5, -4.5), (-123.456, 7.89), (1e-6, 1e3)]:
        vx, vy = transform.world_to_view(x, z)
        assert transform.view_to_world(vx, vy) == pytest.approx((x, z), abs=1e-9)


def test_world_to_view_puts_origin_at_centre_plus_pan():
    transform = ViewTransform(width=800, height=600, scale=20, pan_x=15, pan_y=-5)
    assert transform.world_to_view(0, 0) == (415, 295)
    assert transform.world_to_view(1, 2) == (435, 335)


def test_scale_is_clamped_on_construction():
    assert ViewTransform(scale=0).scale == SCALE_MIN
    assert ViewTransform(scale=1000).scale == SCALE_MAX


def test_zoom_keeps_anchor_point_fixed():
    transform = ViewTransform(width=800, height=600, scale=20, pan_x=13, pan_y=-7)
    anchor = (250.0, 410.0)
    world = transform.view_to_world(*anchor)

    for factor in [1.1, 1.1, 0.9, 1.1, 0.9, 0.9, 0.9, 1.1]:
        transform.zoom_at(*anchor, factor)
        assert transform.view_to_world(*anchor) == pytest.approx(world, abs=1e-9)
        assert transform.world_to_view(*world) == pytest.approx(anchor, abs=1e-9)


def test_zoom_stays_anchored_at_clamp_bounds():
    transform = ViewTransform(width=800, height=600)
    anchor = (600.0, 100.0)
    world = transform.view_to_world(*anchor)

    for _ in range(40):
        transform.wheel(*anchor, delta_y=-1)
    assert transform.scale == SCALE_MAX
    assert transform.view_to_world(*anchor) == pytest.approx(world, abs=1e-9)

    for _ in range(60):
        transform.wheel(*anchor, delta_y=1)
    assert transform.scale == SCALE_MIN
    assert transform.view_to_world(*anchor) == pytest.approx(world, abs=1e-9)


def test_zoom_at_bound_reports_no_change():
    transform = ViewTransform(scale=SCALE_MAX, pan_x=3, pan_y=4)
    assert transform.zoom_at(100, 100, 1.1) is False
    assert (transform.pan_x, transform.pan_y) == (3, 4)


def test_wheel_direction():
    transform = ViewTransform()
    transform.wheel(400, 300, delta_y=120)
    assert transform.scale == pytest.approx(DEFAULT_SCALE * 0.9)

    transform = ViewTransform()
    transform.wheel(400, 300, delta_y=-120)
    assert transform.scale == pytest.approx(DEFAULT_SCALE * 1.1)


def test_button_zoom_steps_and_keeps_centre():
    transform = ViewTransform(width=800, height=600, pan_x=40, pan_y=-20)
    centre_world = transform.view_to_world(400, 300)

    assert transform.zoom_in() is True
    assert transform.scale == 25
    assert transform.view_to_world(400, 300) == pytest.approx(centre_world)

    transform.scale = SCALE_MIN
    assert transform.zoom_out() is False
    assert transform.scale == SCALE_MIN


def test_reset_pan_and_zoom():
    transform = ViewTransform(scale=35, pan_x=10, pan_y=20)
    transform.reset_pan()
    assert (transform.pan_x, transform.pan_y, transform.scale) == (0, 0, 35)
    transform.pan_to(5, 5)
    transform.reset_zoom()
    assert (transform.pan_x, transform.pan_y, transform.scale) == (0, 0, DEFAULT_SCALE)


def test_zoom_percent():
    assert ViewTransform(scale=20).zoom_percent == 100
    assert ViewTransform(scale=30).zoom_percent == 150
    assert ViewTransform(scale=5).zoom_percent == 25


def test_resize_rejects_empty_viewport():
    transform = ViewTransform()
    with pytest.raises(ValueError):
        transform.resize(0, 600)
    with pytest.raises(ValueError):
        ViewTransform(width=800, height=-1)


def test_canvas_size_follows_room_aspect():
    # 10x10 room at 20px/m with padding fits a 800x600 container, stretched square
    assert canvas_size_for_room(800, 600, 10, 10, 20) == (800, 800)
    # Wide room: width wins
    width, height = canvas_size_for_room(400, 400, 20, 5, 20)
    assert width / height == pytest.approx(4.0)
    assert width >= 20 * 20 + 400
