"""Product preview viewer: VTK cube driven by the rotation controller."""
from __future__ import annotations

import logging

import vtk
from PySide6 import QtWidgets, QtCore, QtGui
from vtkmodules.qt.QVTKRenderWindowInteractor import QVTKRenderWindowInteractor

from cubeview.app.app_settings_manager import AppSettingsManager
from cubeview.app.qt_scheduler import QtTickScheduler
from cubeview.core.orientation import Orientation
from cubeview.core.rotation_controller import RotationController, RotationState
from cubeview.status import auto_rotate_button_text
from cubeview.viewers.interactor_styles.preview_interactor_style import PreviewInteractorStyle
from cubeview.viewers.preview_scene import PreviewScene

logger = logging.getLogger(__name__)


class PreviewViewer(QtWidgets.QWidget):
    """
    Interactive 3D preview of a product.

    Provides:
    - VTK rendering of the preview cube (self.scene)
    - RotationController (self.controller) ticking on a QTimer
    - Reset and Stop/Auto Rotate buttons
    - orientationChanged / autoRotateChanged signals
    """

    orientationChanged = QtCore.Signal(object)
    autoRotateChanged = QtCore.Signal(bool)

    def __init__(
            self,
            settings_manager: AppSettingsManager | None = None,
            title: str = "3D Preview",
            parent: QtWidgets.QWidget | None = None,
    ) -> None:
        """
        :param settings_manager: Application settings manager
        :param title: Text of the badge above the view
        :param parent: Parent widget
        """
        super().__init__(parent)
        self.setting = settings_manager or AppSettingsManager()
        rotation = self.setting.rotation
        self._finalized = False

        self.controller = RotationController(
            QtTickScheduler(self),
            tick_interval_ms=rotation.tick_interval_ms,
            auto_rotate_step_deg=rotation.auto_rotate_step_deg,
            drag_sensitivity=rotation.drag_sensitivity,
            auto_rotate=rotation.auto_rotate_on_start,
        )

        self._setup_ui(title)
        self._setup_vtk_rendering()

        self.controller.add_orientation_changed_callback(self._on_orientation_changed)
        self.controller.add_auto_rotate_changed_callback(self._on_auto_rotate_changed)
        self.controller.add_state_changed_callback(self._on_state_changed)

        self.interactor_style = PreviewInteractorStyle(self.controller)
        self.interactor.SetInteractorStyle(self.interactor_style)
        self.interactor.Initialize()
        self._refresh_controls()

        logger.debug("[PreviewViewer] Initialized.")

    def _setup_ui(self, title: str) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        header = QtWidgets.QHBoxLayout()
        self.hint_label = QtWidgets.QLabel("Drag to rotate", self)
        self.badge_label = QtWidgets.QLabel(title, self)
        self.badge_label.setStyleSheet(
            "background-color: #0891b2; color: white; border-radius: 9px; padding: 2px 10px;")
        header.addWidget(self.hint_label)
        header.addStretch(1)
        header.addWidget(self.badge_label)
        layout.addLayout(header)

        self.vtk_widget = QVTKRenderWindowInteractor(self)
        layout.addWidget(self.vtk_widget, 1)

        buttons = QtWidgets.QHBoxLayout()
        buttons.addStretch(1)
        self.reset_button = QtWidgets.QPushButton("Reset", self)
        self.reset_button.clicked.connect(self.reset_view)
        self.auto_rotate_button = QtWidgets.QPushButton(self)
        self.auto_rotate_button.setCheckable(True)
        self.auto_rotate_button.clicked.connect(self.toggle_auto_rotate)
        buttons.addWidget(self.reset_button)
        buttons.addWidget(self.auto_rotate_button)
        buttons.addStretch(1)
        layout.addLayout(buttons)

    def _setup_vtk_rendering(self) -> None:
        render_window = self.vtk_widget.GetRenderWindow()
        self.renderer = vtk.vtkRenderer()
        render_window.AddRenderer(self.renderer)
        render_window.SetAlphaBitPlanes(1)
        render_window.SetMultiSamples(0)
        self.interactor = render_window.GetInteractor()

        self.scene = PreviewScene(self.renderer)
        self.scene.apply_orientation(self.controller.orientation)

    # =====================================================
    # Commands
    # =====================================================

    def reset_view(self) -> None:
        self.controller.reset()

    def toggle_auto_rotate(self) -> None:
        self.controller.toggle_auto_rotate()

    # =====================================================
    # Controller callbacks
    # =====================================================

    def _on_orientation_changed(self, orientation: Orientation) -> None:
        self.scene.apply_orientation(orientation)
        self.update_view()
        self.orientationChanged.emit(orientation)

    def _on_auto_rotate_changed(self, enabled: bool) -> None:
        self._refresh_controls()
        self.autoRotateChanged.emit(enabled)

    def _on_state_changed(self, old_state: RotationState, new_state: RotationState) -> None:
        self._refresh_controls()

    def _refresh_controls(self) -> None:
        enabled = self.controller.auto_rotate
        self.auto_rotate_button.setText(auto_rotate_button_text(enabled))
        self.auto_rotate_button.setChecked(enabled)
        cursor = (QtCore.Qt.ClosedHandCursor if self.controller.is_dragging
                  else QtCore.Qt.OpenHandCursor)
        self.vtk_widget.setCursor(QtGui.QCursor(cursor))

    # =====================================================
    # Rendering
    # =====================================================

    def update_view(self) -> None:
        """Trigger a render."""
        self.vtk_widget.GetRenderWindow().Render()

    # =====================================================
    # Lifecycle
    # =====================================================

    def shutdown(self) -> None:
        """Stop the auto-rotate timer before the render window goes away."""
        if self._finalized:
            return
        self._finalized = True
        self.controller.shutdown()
        self.vtk_widget.Finalize()

    def closeEvent(self, event) -> None:
        self.shutdown()
        super().closeEvent(event)
