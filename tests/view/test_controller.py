# SPDX-License-Identifier: Apache-2.0
import asyncio

import pytest

from globeviz.view.controller import RotationController
from globeviz.view.state import INITIAL_VIEW_STATE, ViewState, normalize_longitude


def test_rotated_steps_west_and_resets_camera():
    state = ViewState(longitude=5.0, latitude=-12.0, zoom=3.0).rotated(0.2)
    assert state.longitude == pytest.approx(4.8)
    assert (state.latitude, state.zoom) == (40.0, 0.5)


def test_longitude_wraps():
    assert normalize_longitude(-180.1) == pytest.approx(179.9)
    assert normalize_longitude(180.0) == pytest.approx(-180.0)
    assert ViewState(-179.9, 40, 0.5).rotated(0.2).longitude == pytest.approx(179.9)


def test_start_arms_single_persistent_timer(scheduler):
    controller = RotationController(scheduler, period=0.05, step=0.2)
    handle = controller.start()
    assert controller.running is handle
    assert controller.start() is handle
    assert len(scheduler.pending) == 1
    assert scheduler.pending[0].delay == 0.05

    scheduler.advance(5)
    assert controller.view_state.longitude == pytest.approx(INITIAL_VIEW_STATE.longitude - 1.0)
    # one timer in flight at any time, re-armed by the same handle
    assert len(scheduler.pending) == 1


def test_stop_is_idempotent(scheduler):
    controller = RotationController(scheduler)
    controller.stop()
    assert controller.running is None
    controller.start()
    controller.stop()
    controller.stop()
    assert controller.running is None
    assert scheduler.pending == []


def test_even_toggles_restore_running_state(scheduler):
    controller = RotationController(scheduler)
    for _ in range(4):
        controller.toggle()
    assert controller.running is None

    controller.start()
    for _ in range(6):
        controller.toggle()
    assert controller.running is not None


def test_toggle_resumes_one_step_further(scheduler):
    controller = RotationController(scheduler, step=0.5)
    before = controller.view_state.longitude
    handle = controller.toggle()
    assert handle is controller.running
    assert controller.view_state.longitude == pytest.approx(before - 0.5)
    assert controller.toggle() is None
    assert controller.running is None


def test_subscribers_see_every_tick(scheduler):
    controller = RotationController(scheduler)
    seen = []
    unsubscribe = controller.subscribe(seen.append)
    controller.start()
    scheduler.advance(3)
    unsubscribe()
    scheduler.advance(2)
    assert len(seen) == 3
    assert all(isinstance(s, ViewState) for s in seen)


def test_handle_releases_exactly_once(scheduler):
    controller = RotationController(scheduler)
    handle = controller.start()
    timer = scheduler.pending[0]
    handle.cancel()
    handle.cancel()
    assert timer.cancelled
    assert handle.released
    assert controller.running is None
    # a stale handle must not stop a newer rotation
    fresh = controller.start()
    handle.cancel()
    assert controller.running is fresh


def test_close_prevents_restart(scheduler):
    controller = RotationController(scheduler)
    controller.start()
    controller.close()
    assert controller.closed and controller.running is None
    with pytest.raises(RuntimeError):
        controller.start()


def test_rejects_non_positive_period(scheduler):
    with pytest.raises(ValueError):
        RotationController(scheduler, period=0)


def test_runs_on_asyncio_loop():
    async def main():
        controller = RotationController(asyncio.get_running_loop(), period=0.001)
        controller.start()
        await asyncio.sleep(0.05)
        controller.close()
        return controller.view_state

    state = asyncio.run(main())
    assert state.longitude < INITIAL_VIEW_STATE.longitude


def test_failing_listener_releases_rotation(scheduler):
    controller = RotationController(scheduler, period=0.05)

    def broken(state):
        raise RuntimeError("listener failed")

    unsubscribe = controller.subscribe(broken)
    handle = controller.start()
    with pytest.raises(RuntimeError, match="listener failed"):
        scheduler.advance(1)
    assert handle.released
    assert controller.running is None
    assert scheduler.pending == []

    unsubscribe()
    restarted = controller.start()
    assert restarted is not handle
    assert len(scheduler.pending) == 1
