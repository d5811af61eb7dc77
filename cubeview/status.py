from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class StatusField:
    """
    A status bar field: label, format string and current value.

    :ivar label: The label/name of the status field.
    :ivar fmt: The format string used when no formatter is given.
    :ivar formatter: Callable formatting the value. Defaults to ``fmt.format``.
    :ivar value: The current value.
    """
    label: str
    fmt: str = "{}"
    formatter: Callable[[Any], str] = None
    value: Any = 0.0

    def __post_init__(self):
        if self.formatter is None:
            self.formatter = lambda v, fmt=self.fmt: fmt.format(v)

    def text(self) -> str:
        return f"{self.label}: {self.formatter(self.value)}"


def format_pitch(pitch: float) -> str:
    return f"{pitch:.1f}°"


def format_yaw(yaw: float) -> str:
    """Yaw is shown folded into [0, 360)."""
    return f"{yaw % 360:.1f}°"


def format_auto_rotate(enabled: bool) -> str:
    return "Auto" if enabled else "Stopped"


def auto_rotate_button_text(enabled: bool) -> str:
    """Label of the auto-rotate button: it offers the opposite action."""
    return "Stop Rotate" if enabled else "Auto Rotate"


# If you want to add a new value, add a field here and update it in PreviewWindow.
STATUS_FIELDS = {
    "pitch": StatusField(label="Pitch", formatter=format_pitch),
    "yaw": StatusField(label="Yaw", formatter=format_yaw),
    "auto_rotate": StatusField(label="Rotation", formatter=format_auto_rotate, value=True),
}
