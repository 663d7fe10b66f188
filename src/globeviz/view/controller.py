# SPDX-License-Identifier: Apache-2.0
"""Timer-driven globe rotation."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from .state import INITIAL_VIEW_STATE, ViewState

LOGGER = logging.getLogger(__name__)

DEFAULT_PERIOD = 0.05
DEFAULT_STEP = 0.2


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """Anything with ``call_later``; an asyncio event loop qualifies."""

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class RotationHandle:
    """Owned reference to an active rotation; releases its timer exactly once."""

    def __init__(self, controller: RotationController) -> None:
        self._controller = controller
        self._timer: TimerHandle | None = None
        self.released = False

    def _arm(self) -> None:
        if self.released:
            return
        self._timer = self._controller._scheduler.call_later(
            self._controller.period, self._fire
        )

    def _fire(self) -> None:
        if self.released:
            return
        self._timer = None
        try:
            self._controller.tick()
        except Exception:
            self.cancel()
            raise
        self._arm()

    def cancel(self) -> None:
        if self.released:
            return
        self.released = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._controller._release(self)


class RotationController:
    """Owns the view state and the periodic timer that rotates it.

    A single timer is re-armed after each tick, so rotation does not depend on
    who observes the view state. ``running`` is ``None`` when stopped.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        view_state: ViewState = INITIAL_VIEW_STATE,
        *,
        period: float = DEFAULT_PERIOD,
        step: float = DEFAULT_STEP,
    ) -> None:
        if period <= 0:
            raise ValueError("rotation period must be positive")
        self._scheduler = scheduler
        self._view_state = view_state
        self.period = float(period)
        self.step = float(step)
        self._running: RotationHandle | None = None
        self._listeners: list[Callable[[ViewState], None]] = []
        self._closed = False

    @property
    def view_state(self) -> ViewState:
        return self._view_state

    @property
    def running(self) -> RotationHandle | None:
        return self._running

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, callback: Callable[[ViewState], None]) -> Callable[[], None]:
        """Register ``callback`` for view state changes; returns an unsubscriber."""

        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def set_view_state(self, state: ViewState) -> None:
        self._view_state = state
        for listener in list(self._listeners):
            listener(state)

    def tick(self) -> ViewState:
        """Advance the rotation one step and notify listeners."""

        self.set_view_state(self._view_state.rotated(self.step))
        return self._view_state

    def start(self) -> RotationHandle:
        if self._closed:
            raise RuntimeError("rotation controller is closed")
        if self._running is not None:
            return self._running
        handle = RotationHandle(self)
        self._running = handle
        handle._arm()
        LOGGER.debug("Rotation started (%.3fs, %.2f deg)", self.period, self.step)
        return handle

    def stop(self) -> None:
        if self._running is None:
            return
        self._running.cancel()

    def toggle(self) -> RotationHandle | None:
        """Pause when running, otherwise step once and resume."""

        if self._running is not None:
            self.stop()
            return None
        self.tick()
        return self.start()

    def close(self) -> None:
        self.stop()
        self._listeners.clear()
        self._closed = True

    def _release(self, handle: RotationHandle) -> None:
        if self._running is handle:
            self._running = None
            LOGGER.debug("Rotation stopped at longitude %.2f", self._view_state.longitude)
