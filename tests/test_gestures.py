import math

import pytest

from editor.design import DesignState
from editor.gestures import GestureKind, NUDGE_STEP, contains_point, hit_test
from editor.instances import FurnitureInstance
from editor.session import EditorSession, ViewMode
from editor.transform import ViewTransform
from models.design import Vector3

# Session fixtures use an 800x600 canvas at 50 px/m, so the room origin sits at
# (400, 300) and the 2x1 m sofa draws as a 15x7.5 px rectangle.
CENTRE = (400.0, 300.0)


def view_of(session, x, z):
    return session.transform.world_to_view(x, z)


def test_click_selects_then_clears(session):
    sofa = session.add_furniture("sofa")
    assert session.plan_input.click(*CENTRE)
    assert session.selected_id == sofa.instance_id

    session.plan_input.click(10, 10)
    assert session.selected_id is None


def test_hit_test_follows_yaw(session, catalog):
    sofa = session.add_furniture("sofa")
    entry = catalog.get("sofa")
    along_width = (406.0, 300.0)
    along_depth = (400.0, 305.0)

    assert contains_point(sofa, entry, session.transform, *along_width)
    assert not contains_point(sofa, entry, session.transform, *along_depth)

    sofa.rotation = Vector3(y=math.pi / 2)
    assert not contains_point(sofa, entry, session.transform, *along_width)
    assert contains_point(sofa, entry, session.transform, *along_depth)


def test_overlapping_instances_pick_the_last_drawn(session):
    session.add_furniture("sofa")
    top = session.add_furniture("sofa")
    assert hit_test(session, *CENTRE) == top.instance_id


def test_placeholder_instances_remain_selectable(session):
    ghost = session.add_furniture("sofa", position=Vector3(x=2, z=0))
    ghost.model_id = "deleted-lamp"
    vx, vy = view_of(session, 2, 0)
    session.plan_input.click(vx + 8, vy)
    assert session.selected_id == ghost.instance_id


def test_press_on_unselected_instance_pans(session):
    session.add_furniture("sofa")
    session.plan_input.pointer_down(*CENTRE)
    assert session.gesture.kind == GestureKind.PANNING


def test_second_press_on_selected_instance_drags(session):
    sofa = session.add_furniture("sofa")
    session.plan_input.click(*CENTRE)
    session.plan_input.pointer_down(402.0, 301.0)
    assert session.gesture.kind == GestureKind.DRAGGING
    assert session.gesture.instance_id == sofa.instance_id

    # Offset from the grab point is preserved while moving
    session.plan_input.pointer_move(402.0 + 100, 301.0 + 50)
    assert sofa.position == Vector3(x=2, y=0, z=1)

    session.plan_input.pointer_up()
    assert session.gesture.kind == GestureKind.IDLE


def test_plan_drag_is_clamped(session):
    sofa = session.add_furniture("sofa")
    session.plan_input.click(*CENTRE)
    session.plan_input.pointer_down(*CENTRE)
    session.plan_input.pointer_move(*view_of(session, 6, 0))
    assert sofa.position == Vector3(x=4.5, y=0, z=0)


def test_pan_follows_pointer_and_leave_cancels(session):
    session.plan_input.pointer_down(100, 100)
    session.plan_input.pointer_move(130, 90)
    assert (session.transform.pan_x, session.transform.pan_y) == (30, -10)

    session.plan_input.pointer_leave()
    assert session.gesture.kind == GestureKind.IDLE
    assert session.plan_input.pointer_move(200, 200) is False
    assert (session.transform.pan_x, session.transform.pan_y) == (30, -10)


def test_wheel_zooms_plan(session):
    assert session.plan_input.wheel(*CENTRE, delta_y=100)
    assert session.transform.scale == pytest.approx(45)


def test_arrow_keys_nudge_selected(session):
    sofa = session.add_furniture("sofa")
    session.select(sofa.instance_id)

    assert session.plan_input.key("ArrowRight")
    assert sofa.position == Vector3(x=NUDGE_STEP, y=0, z=0)
    assert session.plan_input.key("ArrowUp", fine=True)
    assert sofa.position.z == pytest.approx(-0.1)
    assert session.plan_input.key("PageUp") is False


def test_keys_ignored_without_selection_or_mid_drag(session):
    sofa = session.add_furniture("sofa")
    assert session.plan_input.key("ArrowLeft") is False

    session.plan_input.click(*CENTRE)
    session.plan_input.pointer_down(*CENTRE)
    assert session.plan_input.key("ArrowLeft") is False
    assert sofa.position == Vector3()


def test_scene_press_selects_and_drags_in_one_gesture(session):
    sofa = session.add_furniture("sofa")
    session.set_view_mode(ViewMode.SCENE)

    session.scene_input.pointer_down(sofa.instance_id)
    assert session.selected_id == sofa.instance_id
    assert session.gesture.kind == GestureKind.DRAGGING

    session.scene_input.pointer_move(6, -7)
    assert sofa.position == Vector3(x=4.5, y=0, z=-4.5)

    session.scene_input.pointer_up()
    assert session.gesture.kind == GestureKind.IDLE


def test_scene_press_on_empty_space_orbits(session):
    sofa = session.add_furniture("sofa")
    session.set_view_mode(ViewMode.SCENE)
    session.scene_input.pointer_down(None)
    assert session.gesture.kind == GestureKind.ORBITING
    assert session.scene_input.pointer_move(1, 1) is False
    assert sofa.position == Vector3()


def test_viewer_can_navigate_but_not_edit(viewer_session):
    session = viewer_session
    session.design.append(FurnitureInstance(model_id="sofa"))
    instance = session.design.instances[0]

    assert session.plan_input.click(*CENTRE) is False
    assert session.selected_id is None
    session.plan_input.pointer_down(*CENTRE)
    assert session.gesture.kind == GestureKind.PANNING
    assert session.plan_input.wheel(*CENTRE, delta_y=1)

    session.scene_input.pointer_down(instance.instance_id)
    assert session.gesture.kind == GestureKind.ORBITING
    assert session.selected_id is None
    assert session.scene_input.key("ArrowRight") is False


def test_all_input_paths_clamp_identically(catalog, room):
    """2D drag, 3D drag and keyboard nudges toward the same point end in the same place."""
    def fresh():
        design = DesignState(design_id="d", room=room)
        session = EditorSession(design, catalog, transform=ViewTransform(scale=50))
        return session, session.add_furniture("chair")

    target = (7.5, -2.0)

    plan, plan_chair = fresh()
    plan.plan_input.click(*CENTRE)
    plan.plan_input.pointer_down(*CENTRE)
    plan.plan_input.pointer_move(*view_of(plan, *target))

    scene, scene_chair = fresh()
    scene.set_view_mode(ViewMode.SCENE)
    scene.scene_input.pointer_down(scene_chair.instance_id)
    scene.scene_input.pointer_move(*target)

    keys, key_chair = fresh()
    keys.select(key_chair.instance_id)
    for _ in range(15):
        keys.input.key("ArrowRight")
    for _ in range(4):
        keys.input.key("ArrowUp")

    expected = Vector3(x=4.5, y=0, z=-2.0)
    assert plan_chair.position == scene_chair.position == key_chair.position == expected
