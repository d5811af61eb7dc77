from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict
from PySide6.QtCore import QSettings
import logging

from cubeview.core.rotation_controller import (
    DEFAULT_AUTO_ROTATE_STEP_DEG,
    DEFAULT_DRAG_SENSITIVITY,
    DEFAULT_TICK_INTERVAL_MS,
)

logger = logging.getLogger(__name__)

ORG_DOMAIN = "TedApp.org"
APP_NAME = "CubeView"


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value


# ----------------------
# デフォルト設定
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.PRODUCTION.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "rotation": {
        "tick_interval_ms": DEFAULT_TICK_INTERVAL_MS,
        "auto_rotate_step_deg": DEFAULT_AUTO_ROTATE_STEP_DEG,
        "drag_sensitivity": DEFAULT_DRAG_SENSITIVITY,
        "auto_rotate_on_start": True,
    },
}

SECTIONS = tuple(DEFAULTS)


# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"

@dataclass
class RotationConfig:
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    auto_rotate_step_deg: float = DEFAULT_AUTO_ROTATE_STEP_DEG
    drag_sensitivity: float = DEFAULT_DRAG_SENSITIVITY
    auto_rotate_on_start: bool = True

@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    rotation: RotationConfig = field(default_factory=RotationConfig)


# ----------------------
# Validators (範囲外はデフォルトへフォールバック)
# ----------------------
def _truthy(s: str) -> bool:
    return s.strip().lower() in ("1", "true", "yes", "on")


def _validate_run_mode(v: Any) -> RunMode:
    if isinstance(v, RunMode):
        return v
    try:
        return RunMode(str(v).strip().lower())
    except ValueError:
        return RunMode(DEFAULTS["general"]["run_mode"])

def _validate_logging_level(v: Any) -> str:
    v = str(v).strip().upper()
    return v if v in ("DEBUG", "INFO", "WARNING", "ERROR") else DEFAULTS["general"]["logging_level"]

def _validate_tick_interval(v: Any) -> int:
    try:
        i = int(float(v))
    except (TypeError, ValueError):
        return DEFAULT_TICK_INTERVAL_MS
    return i if 1 <= i <= 1000 else DEFAULT_TICK_INTERVAL_MS

def _validate_auto_rotate_step(v: Any) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return DEFAULT_AUTO_ROTATE_STEP_DEG
    return f if 0 < f <= 90 else DEFAULT_AUTO_ROTATE_STEP_DEG

def _validate_drag_sensitivity(v: Any) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return DEFAULT_DRAG_SENSITIVITY
    return f if 0 < f <= 10 else DEFAULT_DRAG_SENSITIVITY

def _validate_bool(v: Any) -> bool:
    # QSettings (INI) は bool を "true"/"false" の文字列で返す
    if isinstance(v, bool):
        return v
    return _truthy(str(v))


_VALIDATORS = {
    "general/run_mode": _validate_run_mode,
    "general/logging_level": _validate_logging_level,
    "rotation/tick_interval_ms": _validate_tick_interval,
    "rotation/auto_rotate_step_deg": _validate_auto_rotate_step,
    "rotation/drag_sensitivity": _validate_drag_sensitivity,
    "rotation/auto_rotate_on_start": _validate_bool,
}


# ---------------------
# AppSettingManager
# ---------------------
class AppSettingsManager:
    """
    アプリケーションの一般設定と回転設定を管理するクラス。
    コード内の DEFAULTS をベースに QSettings の値で上書きする。
    読み込み時に検証し、範囲外の値はフォールバックする。
    set_* は設定すると QSettings に即時保存される。
    """
    def __init__(self, org_domain: str = ORG_DOMAIN, app_name: str = APP_NAME):
        self._settings = QSettings(QSettings.IniFormat, QSettings.UserScope, org_domain, app_name)
        self._data = self._load_effective()

    # 読み取り
    @property
    def data(self) -> AppSettingsData:
        return self._data

    @property
    def run_mode(self) -> RunMode:
        return self._data.general.run_mode

    @property
    def dev_mode(self) -> bool:
        return self.run_mode is RunMode.DEVELOPMENT

    @property
    def logging_level(self) -> str:
        return self._data.general.logging_level

    @property
    def rotation(self) -> RotationConfig:
        return self._data.rotation

    # 書き込み
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_tick_interval_ms(self, v: int) -> None:
        self._data.rotation.tick_interval_ms = self._store("rotation/tick_interval_ms", v)

    def set_auto_rotate_step_deg(self, v: float) -> None:
        self._data.rotation.auto_rotate_step_deg = self._store("rotation/auto_rotate_step_deg", v)

    def set_drag_sensitivity(self, v: float) -> None:
        self._data.rotation.drag_sensitivity = self._store("rotation/drag_sensitivity", v)

    def set_auto_rotate_on_start(self, v: bool) -> None:
        self._data.rotation.auto_rotate_on_start = self._store("rotation/auto_rotate_on_start", v)

    # Reset
    def reset_all_to_default(self) -> None:
        """ユーザー設定を全削除（ショートカットは別管理）"""
        for section in SECTIONS:
            self._settings.remove(section)
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """特定のセクションのみを規定値へ"""
        if section not in SECTIONS:
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()

    def to_dict(self) -> dict[str, Any]:
        data = {
            "general": asdict(self._data.general),
            "rotation": asdict(self._data.rotation),
        }
        data["general"]["run_mode"] = self._data.general.run_mode.value
        return data

    # ---------- 内部実装 ---------------
    def _store(self, key: str, v: Any) -> Any:
        value = _VALIDATORS[key](v)
        self._settings.setValue(key, value)
        logger.debug("Setting stored: %s=%s", key, value)
        return value

    def _load_effective(self) -> AppSettingsData:
        """DEFAULTS をベースに QSettings の上書きを反映、検証、モデル化"""
        merged = self._apply_qsettings_overrides(DEFAULTS)
        return self._make_model_from(merged)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        """
        Apply QSettings overrides on top of the dict based defaults.
        :param base: defaults
        :return: merged dict (validated values)
        """
        merged: dict[str, Any] = {}
        for section in SECTIONS:
            values = dict(base.get(section, {}))
            for name in values:
                key = f"{section}/{name}"
                v = self._settings.value(key, None)
                if v is not None:
                    values[name] = _VALIDATORS[key](v)
            merged[section] = values
        return merged

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        """
        making model from merged dict
        :param merged:
        :return: AppSettingsData
        """
        g = merged.get("general", {})
        r = merged.get("rotation", {})

        def pick(section: dict[str, Any], section_name: str, name: str) -> Any:
            key = f"{section_name}/{name}"
            return _VALIDATORS[key](section.get(name, DEFAULTS[section_name][name]))

        return AppSettingsData(
            general=GeneralConfig(
                run_mode=pick(g, "general", "run_mode"),
                logging_level=pick(g, "general", "logging_level"),
            ),
            rotation=RotationConfig(
                tick_interval_ms=pick(r, "rotation", "tick_interval_ms"),
                auto_rotate_step_deg=pick(r, "rotation", "auto_rotate_step_deg"),
                drag_sensitivity=pick(r, "rotation", "drag_sensitivity"),
                auto_rotate_on_start=pick(r, "rotation", "auto_rotate_on_start"),
            ),
        )
