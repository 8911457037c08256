"""Tests for the background task runner."""

import threading
import time

import pytest

from geotrack.mobile.background import BackgroundService, ServiceError


class FakeNotifier:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def notify(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error


OPTIONS = {
    "task_name": "Location Tracking",
    "task_title": "Tracking Your Location",
    "task_desc": "Running in background",
    "parameters": {"delay": 60},
}


def test_stop_wakes_sleeping_task() -> None:
    service = BackgroundService(notifier=FakeNotifier())
    delays = []
    started = threading.Event()

    def task(delay):
        while service.is_running():
            delays.append(delay)
            started.set()
            service.sleep(delay)

    service.start(task, OPTIONS)
    assert started.wait(2)
    assert service.is_running()

    began = time.monotonic()
    service.stop()
    assert time.monotonic() - began < 2
    assert not service.is_running()
    assert delays == [60.0]


def test_start_twice_raises() -> None:
    service = BackgroundService(notifier=FakeNotifier())
    service.start(lambda delay: service.sleep(5), OPTIONS)
    try:
        with pytest.raises(ServiceError):
            service.start(lambda delay: None, OPTIONS)
    finally:
        service.stop()


def test_start_shows_notification() -> None:
    notifier = FakeNotifier()
    service = BackgroundService(notifier=notifier)
    service.start(lambda delay: None, OPTIONS)
    service.stop()

    assert notifier.calls == [{"title": "Tracking Your Location", "message": "Running in background"}]


def test_notification_failure_does_not_block_start() -> None:
    service = BackgroundService(notifier=FakeNotifier(error=NotImplementedError()))
    done = threading.Event()
    service.start(lambda delay: done.set(), OPTIONS)

    assert done.wait(2)
    service.stop()


def test_crashed_task_clears_running() -> None:
    service = BackgroundService(notifier=FakeNotifier())
    crashed = threading.Event()

    def task(delay):
        crashed.set()
        raise RuntimeError("boom")

    service.start(task, OPTIONS)
    assert crashed.wait(2)
    deadline = time.monotonic() + 2
    while service.is_running() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert not service.is_running()

    # A finished task can be started again
    service.start(lambda delay: None, OPTIONS)
    service.stop()


def test_stale_worker_does_not_see_new_run() -> None:
    """A worker still busy after stop() exits even if tracking restarted."""
    service = BackgroundService(notifier=FakeNotifier(), join_timeout=0.05)
    release = threading.Event()
    finished = threading.Event()
    seen = []

    def slow_task(delay):
        release.wait(2)
        seen.append(service.is_running())
        finished.set()

    service.start(slow_task, OPTIONS)
    service.stop()
    service.start(lambda delay: service.sleep(5), OPTIONS)

    release.set()
    assert finished.wait(2)
    assert seen == [False]
    assert service.is_running()
    service.stop()


def test_stop_when_idle_is_noop() -> None:
    service = BackgroundService(notifier=FakeNotifier())
    service.stop()
    assert not service.is_running()


def test_task_sees_running_from_first_check() -> None:
    """A freshly started task always gets at least one iteration."""
    service = BackgroundService(notifier=FakeNotifier())
    for _ in range(50):
        first_check = []
        checked = threading.Event()

        def task(delay):
            first_check.append(service.is_running())
            checked.set()

        service.start(task, OPTIONS)
        assert checked.wait(2)
        service.stop()
        assert first_check == [True]
