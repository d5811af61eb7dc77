import json

import pytest
import vtk
from PySide6 import QtCore, QtWidgets

from cubeview.app.app_settings_manager import AppSettingsManager
from cubeview.core.orientation import Orientation
from cubeview.core.rotation_controller import RotationState
from cubeview.ui.preview_window import PreviewWindow
from cubeview.viewers import preview_viewer as pv


class FakeInteractor:
    """Holds a real interactor for the style; Initialize does not open a window."""

    def __init__(self):
        self.iren = vtk.vtkRenderWindowInteractor()
        self.iren.SetSize(200, 100)
        self.initialized = False

    def SetInteractorStyle(self, style):
        style.SetInteractor(self.iren)

    def SetEventPosition(self, x, y):
        self.iren.SetEventPosition(x, y)

    def Initialize(self):
        self.initialized = True


class FakeRenderWindow:
    def __init__(self):
        self.renderers = []
        self.render_count = 0
        self.interactor = FakeInteractor()

    def AddRenderer(self, renderer):
        self.renderers.append(renderer)

    def SetAlphaBitPlanes(self, value):
        pass

    def SetMultiSamples(self, value):
        pass

    def GetInteractor(self):
        return self.interactor

    def Render(self):
        self.render_count += 1


class FakeVTKWidget(QtWidgets.QWidget):
    """OpenGL を使わずに QVTKRenderWindowInteractor の代わりをする。"""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.render_window = FakeRenderWindow()
        self.finalize_count = 0

    def GetRenderWindow(self):
        return self.render_window

    def Finalize(self):
        self.finalize_count += 1


@pytest.fixture(autouse=True)
def fake_vtk_widget(monkeypatch):
    monkeypatch.setattr(pv, "QVTKRenderWindowInteractor", FakeVTKWidget)


@pytest.fixture
def settings(tmp_settings):
    mgr = AppSettingsManager()
    # タイマーがテスト中に回転させないよう最大間隔にする
    mgr.set_tick_interval_ms(1000)
    return mgr


@pytest.fixture
def viewer(qtbot, settings):
    w = pv.PreviewViewer(settings_manager=settings, title="Sneaker")
    qtbot.addWidget(w)
    return w


def drag(viewer, start, end):
    """Press at ``start`` and move to ``end`` (VTK coordinates, y up)."""
    iren = viewer.interactor
    style = viewer.interactor_style
    iren.SetEventPosition(*start)
    style.on_left_button_down(None, None)
    iren.SetEventPosition(*end)
    style.on_mouse_move(None, None)


def release(viewer):
    viewer.interactor_style.on_left_button_up(None, None)


def cursor_shape(viewer):
    return viewer.vtk_widget.cursor().shape()


def test_initial_controls(viewer):
    assert viewer.badge_label.text() == "Sneaker"
    assert viewer.controller.state is RotationState.IDLE_AUTO_ROTATING
    assert viewer.controller.ticker_active
    assert viewer.auto_rotate_button.text() == "Stop Rotate"
    assert viewer.auto_rotate_button.isChecked()
    assert cursor_shape(viewer) == QtCore.Qt.OpenHandCursor
    assert viewer.interactor.initialized


def test_button_label_follows_auto_rotate_flag(viewer):
    viewer.auto_rotate_button.click()
    assert viewer.controller.auto_rotate is False
    assert viewer.controller.ticker_active is False
    assert viewer.auto_rotate_button.text() == "Auto Rotate"
    assert not viewer.auto_rotate_button.isChecked()

    viewer.auto_rotate_button.click()
    assert viewer.controller.auto_rotate is True
    assert viewer.controller.ticker_active is True
    assert viewer.auto_rotate_button.text() == "Stop Rotate"


def test_pointer_down_stops_rotation_and_grabs(qtbot, viewer):
    with qtbot.waitSignal(viewer.autoRotateChanged, timeout=1000) as blocker:
        drag(viewer, (10, 20), (30, 10))
    assert blocker.args == [False]

    assert viewer.controller.state is RotationState.DRAGGING
    assert viewer.auto_rotate_button.text() == "Auto Rotate"
    assert cursor_shape(viewer) == QtCore.Qt.ClosedHandCursor
    assert viewer.controller.orientation == Orientation(pitch=5.0, yaw=10.0)

    release(viewer)
    assert viewer.controller.state is RotationState.IDLE_STOPPED
    assert cursor_shape(viewer) == QtCore.Qt.OpenHandCursor


def test_orientation_change_updates_scene_and_renders(viewer):
    before = viewer.vtk_widget.render_window.render_count
    drag(viewer, (10, 20), (30, 20))

    assert viewer.vtk_widget.render_window.render_count == before + 1
    assert viewer.scene.actor.GetOrientation() == pytest.approx((0.0, 10.0, 0.0), abs=1e-6)


def test_reset_button(qtbot, viewer):
    drag(viewer, (10, 20), (30, 10))
    release(viewer)
    assert viewer.controller.auto_rotate is False

    with qtbot.waitSignal(viewer.orientationChanged, timeout=1000) as blocker:
        viewer.reset_button.click()

    assert blocker.args == [Orientation(0.0, 0.0)]
    assert viewer.controller.orientation == Orientation(0.0, 0.0)
    assert viewer.controller.state is RotationState.IDLE_AUTO_ROTATING
    assert viewer.auto_rotate_button.text() == "Stop Rotate"


def test_auto_rotate_runs_on_qt_timer(qtbot, settings):
    settings.set_tick_interval_ms(5)
    w = pv.PreviewViewer(settings_manager=settings)
    qtbot.addWidget(w)

    qtbot.waitUntil(lambda: w.controller.orientation.yaw >= 1.0, timeout=2000)
    assert w.controller.orientation.pitch == 0.0
    w.shutdown()


def test_close_stops_the_ticker(viewer):
    viewer.show()
    assert viewer.controller.ticker_active

    viewer.close()
    assert viewer.controller.ticker_active is False
    assert viewer.vtk_widget.finalize_count == 1

    # 閉じた後の操作でタイマーは復活しない
    viewer.controller.toggle_auto_rotate()
    viewer.controller.toggle_auto_rotate()
    assert viewer.controller.ticker_active is False

    viewer.shutdown()
    assert viewer.vtk_widget.finalize_count == 1


def test_auto_rotate_on_start_setting(qtbot, settings):
    settings.set_auto_rotate_on_start(False)
    w = pv.PreviewViewer(settings_manager=settings)
    qtbot.addWidget(w)

    assert w.controller.state is RotationState.IDLE_STOPPED
    assert w.controller.ticker_active is False
    assert w.auto_rotate_button.text() == "Auto Rotate"


@pytest.fixture
def window(qtbot, settings, tmp_path):
    cfg = tmp_path / "settings"
    cfg.mkdir()
    (cfg / "shortcuts.json").write_text(
        json.dumps({"reset_view": "R", "toggle_auto_rotate": "Space"}), encoding="utf-8")
    win = PreviewWindow(settings_mgr=settings, title="Sneaker", config_path=cfg)
    qtbot.addWidget(win)
    return win


def status_texts(win):
    return {key: label.text() for key, label in win._status_label.items()}


def test_window_status_bar_follows_controller(window):
    assert window.windowTitle() == "CubeView - Sneaker"
    assert status_texts(window) == {
        "pitch": "Pitch: 0.0°",
        "yaw": "Yaw: 0.0°",
        "auto_rotate": "Rotation: Auto",
    }

    drag(window.preview_viewer, (10, 20), (30, 10))
    release(window.preview_viewer)
    assert status_texts(window) == {
        "pitch": "Pitch: 5.0°",
        "yaw": "Yaw: 10.0°",
        "auto_rotate": "Rotation: Stopped",
    }

    window.preview_viewer.reset_view()
    assert status_texts(window)["yaw"] == "Yaw: 0.0°"
    assert status_texts(window)["auto_rotate"] == "Rotation: Auto"


def test_window_shortcuts_drive_the_viewer(window):
    window.shortcut_mgr._on_action_triggered("toggle_auto_rotate")
    assert window.preview_viewer.controller.auto_rotate is False

    window.shortcut_mgr._on_action_triggered("reset_view")
    assert window.preview_viewer.controller.auto_rotate is True


def test_window_close_releases_the_ticker(window):
    window.show()
    controller = window.preview_viewer.controller
    assert controller.ticker_active

    window.close()
    assert controller.ticker_active is False
