# SPDX-License-Identifier: Apache-2.0
"""Cancellable handle around a blocking dataset load."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Generic, TypeVar

LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class LoadTask(Generic[_T]):
    """Run a blocking loader on a worker thread and deliver its result.

    ``on_loaded``/``on_failed`` fire only when the task was not cancelled and
    ``is_alive()`` still reports the owning view as live, so a late result
    never reaches a torn-down view. ``wait()`` always reports the outcome.
    """

    def __init__(
        self,
        loader: Callable[..., _T],
        *args: Any,
        on_loaded: Callable[[_T], None] | None = None,
        on_failed: Callable[[BaseException], None] | None = None,
        is_alive: Callable[[], bool] | None = None,
        **kwargs: Any,
    ) -> None:
        self._loader = loader
        self._args = args
        self._kwargs = kwargs
        self._on_loaded = on_loaded
        self._on_failed = on_failed
        self._is_alive = is_alive or (lambda: True)
        self._task: asyncio.Task[_T] | None = None

    def cancelled(self) -> bool:
        return self._task is not None and self._task.cancelled()

    def start(self) -> LoadTask[_T]:
        """Schedule the load on the running event loop."""

        if self._task is not None:
            raise RuntimeError("load task already started")
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def cancel(self) -> bool:
        """Cancel the pending load; the worker thread finishes but is ignored."""

        if self._task is None or self._task.done():
            return False
        return self._task.cancel()

    async def wait(self) -> _T:
        if self._task is None:
            self.start()
        assert self._task is not None
        return await self._task

    async def _run(self) -> _T:
        try:
            result = await asyncio.to_thread(self._loader, *self._args, **self._kwargs)
        except asyncio.CancelledError:
            LOGGER.debug("Load cancelled: %s", getattr(self._loader, "__name__", self._loader))
            raise
        except Exception as exc:
            if self._on_failed is not None and self._is_alive():
                self._on_failed(exc)
            raise
        if self._is_alive():
            if self._on_loaded is not None:
                self._on_loaded(result)
        else:
            LOGGER.debug("Dropping load result for a view that is no longer live")
        return result
