# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import pytest

CLIENTS_CSV = "Longitude,Latitude,Name,Country\n10,20,Acme,USA\n,,Bad,X\n30,40,Beta,UK\n"


class FakeTimer:
    def __init__(self, scheduler: FakeScheduler, delay: float, callback) -> None:
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual stand-in for an event loop's ``call_later``."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback):
        timer = FakeTimer(self, delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and t.callback is not None]

    def advance(self, ticks: int = 1) -> None:
        for _ in range(ticks):
            pending = self.pending
            if not pending:
                return
            timer = pending[0]
            callback, timer.callback = timer.callback, None
            callback()


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def clients_csv() -> str:
    return CLIENTS_CSV
