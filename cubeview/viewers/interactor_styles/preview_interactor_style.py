from vtkmodules.vtkInteractionStyle import vtkInteractorStyleTrackballCamera

from cubeview.core.rotation_controller import RotationController


class PreviewInteractorStyle(vtkInteractorStyleTrackballCamera):
    """
    Forwards left-button drags to the rotation controller.

    VTK reports event positions with a bottom-left origin; the controller gets
    top-left coordinates so that dragging down increases pitch.
    Moving out of the view while dragging ends the drag.
    Wheel zoom keeps the trackball default.
    """
    def __init__(self, controller: RotationController):
        super().__init__()
        self.controller = controller

        self.RemoveObservers("LeftButtonPressEvent")
        self.AddObserver("LeftButtonPressEvent", self.on_left_button_down)
        self.RemoveObservers("LeftButtonReleaseEvent")
        self.AddObserver("LeftButtonReleaseEvent", self.on_left_button_up)
        self.RemoveObservers("MouseMoveEvent")
        self.AddObserver("MouseMoveEvent", self.on_mouse_move)
        self.RemoveObservers("LeaveEvent")
        self.AddObserver("LeaveEvent", self.on_leave)

    def _event_position(self) -> tuple[int, int]:
        iren = self.GetInteractor()
        x, y = iren.GetEventPosition()
        _, height = iren.GetSize()
        return x, height - 1 - y

    def _event_inside(self) -> bool:
        iren = self.GetInteractor()
        x, y = iren.GetEventPosition()
        width, height = iren.GetSize()
        return 0 <= x < width and 0 <= y < height

    def on_left_button_down(self, obj, event):
        self.controller.pointer_down(*self._event_position())

    def on_mouse_move(self, obj, event):
        if not self.controller.is_dragging:
            return
        # Qt はボタン押下中にマウスをグラブするため LeaveEvent が届かない
        if self._event_inside():
            self.controller.pointer_move(*self._event_position())
        else:
            self.controller.pointer_leave()

    def on_left_button_up(self, obj, event):
        self.controller.pointer_up()

    def on_leave(self, obj, event):
        self.controller.pointer_leave()
