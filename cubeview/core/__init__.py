"""Core components layer - view-independent rotation logic."""

from cubeview.core.orientation import DragSession, Orientation
from cubeview.core.rotation_controller import RotationController, RotationState
from cubeview.core.scheduling import TickerHandle, TickScheduler

__all__ = [
    "DragSession",
    "Orientation",
    "RotationController",
    "RotationState",
    "TickerHandle",
    "TickScheduler",
]
