import pytest
import vtk

from cubeview.core.orientation import Orientation
from cubeview.core.rotation_controller import RotationState, RotationController
from cubeview.viewers.interactor_styles.preview_interactor_style import PreviewInteractorStyle


@pytest.fixture
def rig(scheduler):
    controller = RotationController(scheduler)
    iren = vtk.vtkRenderWindowInteractor()
    iren.SetSize(200, 100)
    style = PreviewInteractorStyle(controller)
    style.SetInteractor(iren)
    return controller, iren, style


def test_event_position_is_flipped_to_top_left_origin(rig):
    controller, iren, style = rig
    iren.SetEventPosition(10, 20)
    style.on_left_button_down(None, None)

    assert controller.state is RotationState.DRAGGING
    assert (controller.drag_session.x, controller.drag_session.y) == (10, 79)


def test_dragging_down_increases_pitch(rig):
    controller, iren, style = rig
    iren.SetEventPosition(10, 20)
    style.on_left_button_down(None, None)
    # VTK の y は上向きなので、下へのドラッグは y が減る
    iren.SetEventPosition(20, 10)
    style.on_mouse_move(None, None)
    style.on_left_button_up(None, None)

    assert controller.orientation == Orientation(pitch=5.0, yaw=5.0)
    assert controller.state is RotationState.IDLE_STOPPED


def test_move_without_press_and_leave(rig):
    controller, iren, style = rig
    iren.SetEventPosition(50, 50)
    style.on_mouse_move(None, None)
    assert controller.orientation == Orientation(0.0, 0.0)

    style.on_left_button_down(None, None)
    style.on_leave(None, None)
    assert controller.is_dragging is False


@pytest.mark.parametrize("position", [(500, 20), (-5, 20), (10, 100), (10, -1)])
def test_dragging_out_of_the_view_ends_the_drag(rig, position):
    controller, iren, style = rig
    iren.SetEventPosition(10, 20)
    style.on_left_button_down(None, None)

    iren.SetEventPosition(*position)
    style.on_mouse_move(None, None)

    assert controller.is_dragging is False
    assert controller.orientation == Orientation(0.0, 0.0)

    # 戻ってきてもボタンを押し直すまで回転しない
    iren.SetEventPosition(20, 20)
    style.on_mouse_move(None, None)
    assert controller.orientation == Orientation(0.0, 0.0)
