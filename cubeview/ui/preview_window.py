import copy
import logging
from pathlib import Path

from PySide6.QtWidgets import QMainWindow, QLabel

from cubeview.app.app_settings_manager import AppSettingsManager
from cubeview.app.shortcut_manager import ShortcutManager
from cubeview.core.orientation import Orientation
from cubeview.status import STATUS_FIELDS, StatusField
from cubeview.utils.resource_paths import settings_dir
from cubeview.viewers.preview_viewer import PreviewViewer

logger = logging.getLogger(__name__)


class PreviewWindow(QMainWindow):
    """Main application window containing the preview viewer."""

    def __init__(self,
                 settings_mgr: AppSettingsManager | None = None,
                 title: str = "3D Preview",
                 config_path: Path | None = None):
        """
        :param settings_mgr: Application settings manager.
        :param title: Badge text of the preview.
        :param config_path: Directory holding shortcuts.json.
        """
        super().__init__()

        self.setting = settings_mgr or AppSettingsManager()

        # インスタンス毎にステータスを保持できるようにディープコピーをする。
        self.status_fields: dict[str, StatusField] = {
            k: copy.deepcopy(v) for k, v in STATUS_FIELDS.items()
        }
        self._status_label: dict[str, QLabel] = {}

        self.setWindowTitle(f"CubeView - {title}")
        self.preview_viewer = PreviewViewer(settings_manager=self.setting, title=title, parent=self)
        self.setCentralWidget(self.preview_viewer)
        self.setGeometry(100, 100, 640, 720)

        self._setup_menus()
        self._setup_status_bar()

        self.shortcut_mgr = ShortcutManager(
            parent=self,
            config_path=config_path or settings_dir(),
            settings_manager=self.setting,
        )
        self._register_shortcuts()

        self.preview_viewer.orientationChanged.connect(self._on_orientation_changed)
        self.preview_viewer.autoRotateChanged.connect(self._on_auto_rotate_changed)
        self._on_orientation_changed(self.preview_viewer.controller.orientation)
        self._on_auto_rotate_changed(self.preview_viewer.controller.auto_rotate)

    def _setup_menus(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        file_menu.addAction("&Quit", self.close)

        view_menu = menubar.addMenu("&View")
        view_menu.addAction("&Reset View", self.preview_viewer.reset_view)
        view_menu.addAction("Toggle &Auto Rotate", self.preview_viewer.toggle_auto_rotate)

    def _setup_status_bar(self) -> None:
        for key, field in self.status_fields.items():
            label = QLabel(field.text(), self)
            self.statusBar().addPermanentWidget(label)
            self._status_label[key] = label

    def _register_shortcuts(self) -> None:
        commands = {
            "reset_view": self.preview_viewer.reset_view,
            "toggle_auto_rotate": self.preview_viewer.toggle_auto_rotate,
        }
        for cmd, callback in commands.items():
            try:
                self.shortcut_mgr.add_callback(cmd, callback)
            except KeyError:
                logger.warning("Shortcut '%s' has no key binding in shortcuts.json", cmd)

    def update_status(self, **kwargs) -> None:
        """Update the status fields and refresh their labels."""
        for key, value in kwargs.items():
            field = self.status_fields.get(key)
            if field is None:
                continue
            field.value = value
            label = self._status_label.get(key)
            if label is not None:
                label.setText(field.text())

    def _on_orientation_changed(self, orientation: Orientation) -> None:
        self.update_status(pitch=orientation.pitch, yaw=orientation.yaw)

    def _on_auto_rotate_changed(self, enabled: bool) -> None:
        self.update_status(auto_rotate=enabled)

    def closeEvent(self, event) -> None:
        self.preview_viewer.shutdown()
        super().closeEvent(event)
