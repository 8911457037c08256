"""Long-running background task runner.

Runs a task on a worker thread until told to stop. The task polls
``is_running()`` as its loop condition and uses ``sleep()`` for delays so a
stop request wakes it immediately. In-flight calls made by the task are not
interrupted.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from plyer import notification as plyer_notification


logger = logging.getLogger(__name__)

_local = threading.local()


class ServiceError(Exception):
    """The background service could not be started or stopped."""


class _Run:
    def __init__(self):
        self.active = threading.Event()
        self.wake = threading.Event()
        self.thread: Optional[threading.Thread] = None


class BackgroundService:
    def __init__(self, notifier=None, join_timeout: float = 2.0):
        self._notifier = notifier if notifier is not None else plyer_notification
        self._join_timeout = join_timeout
        self._run: Optional[_Run] = None
        self._lock = threading.Lock()

    def is_running(self) -> bool:
        # Workers check their own run, so one left over from a previous
        # start never sees the new run
        run = getattr(_local, "run", None) or self._run
        return run is not None and run.active.is_set()

    def start(self, task: Callable[[float], Any], options: Dict[str, Any]) -> None:
        delay = float((options.get("parameters") or {}).get("delay", 15.0))
        with self._lock:
            if self.is_running():
                raise ServiceError("Background service is already running")
            run = _Run()
            run.active.set()
            run.thread = threading.Thread(
                target=self._worker,
                args=(run, task, delay),
                name=options.get("task_name", "background-task"),
                daemon=True,
            )
            self._run = run
            try:
                run.thread.start()
            except RuntimeError as exc:
                self._run = None
                raise ServiceError(f"Unable to start background task: {exc}") from exc
        logger.info("Background task %r started (delay %.1fs)", run.thread.name, delay)
        self._notify(options)

    def _worker(self, run: _Run, task: Callable[[float], Any], delay: float) -> None:
        _local.run = run
        try:
            task(delay)
        except Exception:
            logger.exception("Background task crashed")
        finally:
            run.active.clear()

    def sleep(self, seconds: float) -> None:
        run = getattr(_local, "run", None) or self._run
        if run is None:
            return
        run.wake.wait(seconds)

    def stop(self) -> None:
        with self._lock:
            run = self._run
            self._run = None
        if run is None:
            return
        run.active.clear()
        run.wake.set()
        thread = run.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self._join_timeout)
            if thread.is_alive():
                logger.info("Background task still finishing an in-flight call")
        logger.info("Background task stopped")

    def _notify(self, options: Dict[str, Any]) -> None:
        if not self._notifier:
            return
        try:
            self._notifier.notify(
                title=options.get("task_title", "GeoTrack"),
                message=options.get("task_desc", ""),
            )
        except NotImplementedError:
            pass
        except Exception:
            logger.debug("Notification failed", exc_info=True)
