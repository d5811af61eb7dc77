"""Orientation and drag session values, separated from UI concerns."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Orientation:
    """
    Immutable representation of the preview rotation in degrees.

    pitch is the rotation around the screen X axis, yaw around the Y axis.
    Neither is normalized; only ``yaw % 360`` matters for display.
    """
    pitch: float = 0.0
    yaw: float = 0.0

    @property
    def display_yaw(self) -> float:
        """Yaw folded into [0, 360)."""
        return self.yaw % 360

    def rotated(self, delta_pitch: float, delta_yaw: float) -> Orientation:
        """Return a new orientation with the deltas added."""
        return Orientation(self.pitch + delta_pitch, self.yaw + delta_yaw)

    def __str__(self) -> str:
        return f"Pitch: {self.pitch:.1f}, Yaw: {self.display_yaw:.1f}"


@dataclass(frozen=True)
class DragSession:
    """Anchor of the pointer while a drag is in progress."""
    x: float
    y: float

    def delta_to(self, x: float, y: float) -> tuple[float, float]:
        """Pointer delta from the anchor to (x, y)."""
        return x - self.x, y - self.y
