"""Rotation controller - drag and auto-rotate state machine of the preview cube."""
from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, Optional

from cubeview.core.orientation import DragSession, Orientation
from cubeview.core.scheduling import TickerHandle, TickScheduler
from cubeview.utils.log_util import log_io

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 30
DEFAULT_AUTO_ROTATE_STEP_DEG = 0.5
DEFAULT_DRAG_SENSITIVITY = 0.5


class RotationState(Enum):
    """States of the rotation controller."""
    IDLE_AUTO_ROTATING = auto()
    IDLE_STOPPED = auto()
    DRAGGING = auto()


class RotationController:
    """
    Owns the preview orientation and blends pointer drags with auto-rotation.

    The controller is UI-framework-agnostic. The repeating ticker is obtained
    from the injected ``TickScheduler`` while the controller is in
    IDLE_AUTO_ROTATING and cancelled on any exit from that state, so drag
    input and auto-rotate ticks never apply at the same time.

    Usage:
        controller = RotationController(QtTickScheduler(widget))
        controller.add_orientation_changed_callback(on_orientation_changed)
        controller.pointer_down(100, 100)
        controller.pointer_move(110, 104)
        controller.pointer_up()
    """

    def __init__(
            self,
            scheduler: TickScheduler,
            *,
            tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
            auto_rotate_step_deg: float = DEFAULT_AUTO_ROTATE_STEP_DEG,
            drag_sensitivity: float = DEFAULT_DRAG_SENSITIVITY,
            auto_rotate: bool = True,
    ) -> None:
        """
        :param scheduler: Source of the repeating auto-rotate ticker
        :param tick_interval_ms: Ticker period in milliseconds
        :param auto_rotate_step_deg: Yaw added on every tick
        :param drag_sensitivity: Degrees per pointer pixel while dragging
        :param auto_rotate: Initial auto-rotate flag
        """
        if tick_interval_ms <= 0:
            raise ValueError(f"Tick interval must be > 0, got {tick_interval_ms}.")
        if auto_rotate_step_deg <= 0:
            raise ValueError(f"Auto-rotate step must be > 0, got {auto_rotate_step_deg}.")
        if drag_sensitivity <= 0:
            raise ValueError(f"Drag sensitivity must be > 0, got {drag_sensitivity}.")

        self._scheduler = scheduler
        self._tick_interval_ms = int(tick_interval_ms)
        self._auto_rotate_step_deg = float(auto_rotate_step_deg)
        self._drag_sensitivity = float(drag_sensitivity)

        self._orientation = Orientation(0.0, 0.0)
        self._auto_rotate = bool(auto_rotate)
        self._drag: Optional[DragSession] = None
        self._ticker: Optional[TickerHandle] = None
        self._closed = False

        self._on_orientation_changed_callbacks: list[Callable[[Orientation], None]] = []
        self._on_auto_rotate_changed_callbacks: list[Callable[[bool], None]] = []
        self._on_state_changed_callbacks: list[Callable[[RotationState, RotationState], None]] = []

        self._sync_ticker()

    # =====================================================
    # Outputs
    # =====================================================

    @property
    def orientation(self) -> Orientation:
        """Current orientation."""
        return self._orientation

    @property
    def auto_rotate(self) -> bool:
        """Current auto-rotate flag."""
        return self._auto_rotate

    @property
    def drag_session(self) -> Optional[DragSession]:
        return self._drag

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def state(self) -> RotationState:
        """Current state, derived from the drag session and the flag."""
        if self._drag is not None:
            return RotationState.DRAGGING
        if self._auto_rotate:
            return RotationState.IDLE_AUTO_ROTATING
        return RotationState.IDLE_STOPPED

    @property
    def ticker_active(self) -> bool:
        """True while a repeating ticker is held."""
        return self._ticker is not None

    @property
    def tick_interval_ms(self) -> int:
        return self._tick_interval_ms

    @property
    def auto_rotate_step_deg(self) -> float:
        return self._auto_rotate_step_deg

    @property
    def drag_sensitivity(self) -> float:
        return self._drag_sensitivity

    # =====================================================
    # Pointer input
    # =====================================================

    def pointer_down(self, x: float, y: float) -> None:
        """Start a drag at (x, y). Auto-rotate is switched off."""
        old_state = self.state
        self._drag = DragSession(x, y)
        self._set_auto_rotate_flag(False)
        self._sync_ticker()
        logger.debug("Drag started at (%s, %s)", x, y)
        self._notify_state_changed(old_state)

    def pointer_move(self, x: float, y: float) -> None:
        """Rotate by the pointer delta since the last drag event."""
        if self._drag is None:
            return
        delta_x, delta_y = self._drag.delta_to(x, y)
        self._drag = DragSession(x, y)
        self._set_orientation(self._orientation.rotated(
            delta_y * self._drag_sensitivity,
            delta_x * self._drag_sensitivity,
        ))

    def pointer_up(self) -> None:
        """End the drag session, if any."""
        self._end_drag()

    def pointer_leave(self) -> None:
        """Pointer left the tracking area; same as releasing the button."""
        self._end_drag()

    def _end_drag(self) -> None:
        if self._drag is None:
            return
        old_state = self.state
        self._drag = None
        self._sync_ticker()
        logger.debug("Drag ended at %s", self._orientation)
        self._notify_state_changed(old_state)

    # =====================================================
    # Ticker
    # =====================================================

    def tick(self) -> None:
        """Advance yaw by one auto-rotate step. Ignored unless auto-rotating."""
        if self.state is not RotationState.IDLE_AUTO_ROTATING or self._closed:
            return
        current = self._orientation
        self._set_orientation(Orientation(
            current.pitch,
            (current.yaw + self._auto_rotate_step_deg) % 360,
        ))

    # =====================================================
    # Commands
    # =====================================================

    @log_io()
    def reset(self) -> Orientation:
        """
        Return to the initial view: orientation (0, 0) and auto-rotate on.

        An open drag session is discarded.
        """
        old_state = self.state
        self._drag = None
        self._set_orientation(Orientation(0.0, 0.0))
        self._set_auto_rotate_flag(True)
        self._sync_ticker()
        logger.info("Rotation reset")
        self._notify_state_changed(old_state)
        return self._orientation

    @log_io()
    def toggle_auto_rotate(self) -> bool:
        """
        Flip the auto-rotate flag.

        While dragging only the flag changes; it takes effect when the drag ends.
        :return: New flag value
        """
        self.set_auto_rotate(not self._auto_rotate)
        return self._auto_rotate

    def set_auto_rotate(self, enabled: bool) -> None:
        """Set the auto-rotate flag. Orientation is never touched."""
        old_state = self.state
        self._set_auto_rotate_flag(bool(enabled))
        self._sync_ticker()
        self._notify_state_changed(old_state)

    def shutdown(self) -> None:
        """Release the ticker for good. Called when the hosting view is torn down."""
        if self._closed:
            return
        self._closed = True
        self._sync_ticker()
        logger.debug("Rotation controller shut down")

    # =====================================================
    # Callbacks
    # =====================================================

    def add_orientation_changed_callback(self, callback: Callable[[Orientation], None]) -> None:
        """
        Add a callback for orientation changes.

        Callback signature: callback(orientation: Orientation) -> None
        """
        self._on_orientation_changed_callbacks.append(callback)

    def remove_orientation_changed_callback(self, callback: Callable[[Orientation], None]) -> None:
        self._on_orientation_changed_callbacks.remove(callback)

    def add_auto_rotate_changed_callback(self, callback: Callable[[bool], None]) -> None:
        """
        Add a callback for auto-rotate flag changes.

        Callback signature: callback(enabled: bool) -> None
        """
        self._on_auto_rotate_changed_callbacks.append(callback)

    def remove_auto_rotate_changed_callback(self, callback: Callable[[bool], None]) -> None:
        self._on_auto_rotate_changed_callbacks.remove(callback)

    def add_state_changed_callback(
            self,
            callback: Callable[[RotationState, RotationState], None]
    ) -> None:
        """
        Add a callback for state transitions.

        Callback signature: callback(old_state, new_state) -> None
        """
        self._on_state_changed_callbacks.append(callback)

    def remove_state_changed_callback(
            self,
            callback: Callable[[RotationState, RotationState], None]
    ) -> None:
        self._on_state_changed_callbacks.remove(callback)

    # =====================================================
    # Internals
    # =====================================================

    def _sync_ticker(self) -> None:
        """Hold exactly one ticker while auto-rotating, none otherwise."""
        should_run = (not self._closed
                      and self._auto_rotate
                      and self._drag is None)

        if should_run and self._ticker is None:
            self._ticker = self._scheduler.schedule_repeating(self._tick_interval_ms, self.tick)
            logger.debug("Auto-rotate ticker started (%d ms)", self._tick_interval_ms)
        elif not should_run and self._ticker is not None:
            ticker, self._ticker = self._ticker, None
            ticker.cancel()
            logger.debug("Auto-rotate ticker stopped")

    def _set_orientation(self, orientation: Orientation) -> None:
        if orientation == self._orientation:
            return
        self._orientation = orientation
        for callback in list(self._on_orientation_changed_callbacks):
            try:
                callback(orientation)
            except Exception as e:
                logger.exception(f"Error in orientation changed callback: {e}")

    def _set_auto_rotate_flag(self, enabled: bool) -> None:
        if enabled == self._auto_rotate:
            return
        self._auto_rotate = enabled
        logger.debug("Auto-rotate: %s", enabled)
        for callback in list(self._on_auto_rotate_changed_callbacks):
            try:
                callback(enabled)
            except Exception as e:
                logger.exception(f"Error in auto-rotate changed callback: {e}")

    def _notify_state_changed(self, old_state: RotationState) -> None:
        new_state = self.state
        if new_state is old_state:
            return
        logger.info(f"Rotation state changed from {old_state.name} -> {new_state.name}")
        for callback in list(self._on_state_changed_callbacks):
            try:
                callback(old_state, new_state)
            except Exception as e:
                logger.exception(f"Error in state changed callback: {e}")
