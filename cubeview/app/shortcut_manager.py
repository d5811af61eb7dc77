import sys
import logging

from pathlib import Path
from typing import Callable, Optional
from PySide6.QtWidgets import QWidget
from PySide6.QtGui import QKeySequence, QAction
from PySide6.QtCore import QSettings

from cubeview.ui.error_notifier import ErrorNotifier
from cubeview.app.app_settings_manager import AppSettingsManager, APP_NAME, ORG_DOMAIN
from cubeview.utils.json_loader import read_json_dict


logger = logging.getLogger(__name__)


class ShortcutManager:
    """
    Manage keyboard shortcuts.
    -------------------------
    Defaults come from `shortcuts.json` in ``config_path``; user overrides
    are stored in QSettings under `shortcuts/*`.
    File format example:
        {
            "reset_view": "R",
            "toggle_auto_rotate": "Space"
        }
    --------------------------
    - Call add_callback to bind a function to a registered command.
    - A failing callback is reported through ErrorNotifier. In development
      run mode the exception is re-raised afterwards.
    """
    def __init__(self, parent: QWidget, config_path: Path,
                 settings_manager: Optional[AppSettingsManager] = None):
        self.parent = parent
        self.config_path = config_path
        self._shortcut_settings = QSettings(QSettings.IniFormat, QSettings.UserScope, ORG_DOMAIN, APP_NAME)
        self._settings_manager: AppSettingsManager = settings_manager or AppSettingsManager()

        self._actions: dict[str, QAction] = {}
        self._callbacks: dict[str, Callable] = {}
        self._file_defaults = self._load_default_shortcuts()
        self._shortcuts = self._apply_user_overrides(self._file_defaults)
        self._register_actions()

        logger.debug(
            "ShortcutManager initialized run mode: %s",
            self._settings_manager.run_mode.value,
        )

    def _load_default_shortcuts(self) -> dict[str, str]:
        path = self.config_path / "shortcuts.json"
        logger.debug(f"Loading default shortcuts: {path}")
        data = read_json_dict(path, logger=logger) or {}
        return {str(cmd): str(seq) for cmd, seq in data.items()}

    def _apply_user_overrides(self, defaults: dict[str, str]) -> dict[str, str]:
        shortcuts = dict(defaults)
        for cmd in defaults:
            user_seq = self._shortcut_settings.value(f"shortcuts/{cmd}", None)
            if user_seq:
                shortcuts[cmd] = str(user_seq)
        return shortcuts

    def _register_actions(self):
        for cmd, seq in self._shortcuts.items():
            action = QAction(cmd.replace("_", " ").title(), self.parent)
            action.setShortcut(QKeySequence(seq))
            action.triggered.connect(lambda checked=False, c=cmd: self._on_action_triggered(c))
            self.parent.addAction(action)
            self._actions[cmd] = action

    def _on_action_triggered(self, cmd: str):
        """
        Trigger the callback function for the given command.
        :param cmd: Command name.(e.g., "reset_view")
        """
        cb = self._callbacks.get(cmd)
        if cb is None:
            ErrorNotifier.instance().notify(
                title="Unregistered Shortcut",
                msg=f"Command '{cmd}' is not registered.",
                severity="error",
                dedup_seconds=1.0,
            )
            return

        func_name = getattr(cb, "__qualname__", repr(cb))
        func_module = getattr(cb, "__module__", "")
        logger.info("Shortcut triggered: %s -> %s.%s", cmd, func_module, func_name)
        try:
            cb()
        except Exception:
            ErrorNotifier.instance().notify(
                title="Shortcut Error",
                msg=f"Error in shortcut callback '{cmd}'",
                exc_info=sys.exc_info(),
                severity="error",
                dedup_seconds=1.0,
            )
            if self._settings_manager.dev_mode:
                raise

    def add_callback(self, command_name: str, callback: Callable):
        """
        Add a callback function for a shortcut.
        :param command_name: Command name (e.g., "reset_view").
        :param callback: Callback function (e.g., controller.reset).
        """
        if command_name not in self._actions:
            raise KeyError(f"Command '{command_name}' not found in registered actions.")
        self._callbacks[command_name] = callback

    def shortcut(self, cmd: str) -> str:
        """Current key sequence of a command as text."""
        return self._actions[cmd].shortcut().toString()

    def update_shortcut(self, cmd: str, new_seq: str) -> bool:
        """Rebind a command. Returns False on conflict or unknown command."""
        action = self._actions.get(cmd)
        if action is None:
            return False
        normalized = QKeySequence(new_seq).toString()
        if any(a.shortcut().toString() == normalized
               for c, a in self._actions.items() if c != cmd):
            return False
        action.setShortcut(QKeySequence(new_seq))
        self._shortcut_settings.setValue(f"shortcuts/{cmd}", new_seq)
        return True

    def reset_to_default(self):
        self._shortcut_settings.remove("shortcuts")
        self._shortcuts = dict(self._file_defaults)
        for cmd, action in self._actions.items():
            action.setShortcut(QKeySequence(self._shortcuts[cmd]))

    def actions(self):
        return self._actions.values()
