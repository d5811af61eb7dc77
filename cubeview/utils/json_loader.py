from __future__ import annotations

from datetime import datetime
import json
import os
from pathlib import Path
from typing import Any, Optional


class SettingsError(RuntimeError):
    """Raised when strict settings loading fails (dev/CI)."""


def truthy_env(name: str) -> bool:
    """Return True if environment variable is truthy (1, true, yes, on)."""
    v = os.environ.get(name, "")
    return v.strip().lower() in ("1", "true", "yes", "on")


def _fail(
        msg: str,
        *,
        strict: bool,
        warnings: list[str],
        logger: Any = None,
        exc: Exception | None = None,
        level: str = "warning",
) -> None:
    """Record a warning and log it, or raise SettingsError when strict=True."""
    if strict:
        raise SettingsError(msg) from exc
    warnings.append(msg)
    if logger is not None:
        if level == "exception" and exc is not None:
            logger.exception(msg)
        else:
            getattr(logger, level, logger.warning)(msg)
    return None


def _quarantine(path: Path, *, logger: Any = None) -> Path:
    """Rename a broken JSON file to *.broken-YYYYmmdd-HHMMSS and return the new path."""
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    broken = path.with_suffix(f".broken-{ts}")
    path.rename(broken)
    if logger is not None:
        logger.warning(f"Broken JSON quarantined to {broken}")
    return broken


def read_json_dict(
        path: Path,
        *,
        strict: bool = False,
        quarantine_broken: bool = False,
        warnings: list[str] | None = None,
        logger: Any = None,
) -> Optional[dict[str, Any]]:
    """
    Read a JSON file whose top-level value is an object.

    - strict=True: missing/broken/non-dict -> raise SettingsError
    - strict=False: return None and record warnings (and log if logger given)
    - quarantine_broken=True: rename broken file to .broken-YYYYmmdd-HHMMSS
    """
    warnings = warnings if warnings is not None else []
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        return _fail(f"Defaults JSON missing: {path}",
                     strict=strict, warnings=warnings, logger=logger, exc=e)
    except OSError as e:
        return _fail(f"Failed to read JSON from {path}: ({e})",
                     strict=strict, warnings=warnings, logger=logger, exc=e,
                     level="exception")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse JSON from {path}: ({e})"
        if quarantine_broken:
            try:
                msg += f" -> quarantined to {_quarantine(path, logger=logger)}"
            except OSError as qe:
                return _fail(msg, strict=strict, warnings=warnings, logger=logger, exc=qe,
                             level="exception")
        return _fail(msg, strict=strict, warnings=warnings, logger=logger, exc=e)

    if not isinstance(data, dict):
        return _fail(f"Defaults JSON must be an object at top-level: {path}",
                     strict=strict, warnings=warnings, logger=logger, level="error")
    return data
