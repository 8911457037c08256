"""Current-position queries on top of plyer's callback-based GPS facade."""

import logging
import threading
import time
from typing import NamedTuple, Optional, Set

from plyer import gps as plyer_gps


logger = logging.getLogger(__name__)

# The only provider whose loss makes a request hopeless; plyer also listens
# on network/passive providers that are often switched off
GPS_PROVIDER = "gps"


class Position(NamedTuple):
    latitude: float
    longitude: float


class PositionError(Exception):
    """No usable position could be obtained."""


class _Request:
    def __init__(self):
        self.answered = threading.Event()
        self.error: Optional[str] = None


class PositionProvider:
    """One-shot position requests with timeout and maximum-age semantics.

    plyer only offers a stream of fixes, so the GPS is started when the first
    request arrives and stopped when the last pending request leaves. The
    most recent fix is kept and served to requests that tolerate its age.
    """

    def __init__(self, gps=None, clock=time.monotonic):
        self._gps = gps if gps is not None else plyer_gps
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: Set[_Request] = set()
        self._last_fix: Optional[Position] = None
        self._last_fix_at: Optional[float] = None
        self._active = False

    def _on_location(self, **kwargs):
        # kwargs vary by provider; normalize common fields
        lat = kwargs.get("lat", kwargs.get("latitude"))
        lon = kwargs.get("lon", kwargs.get("longitude"))
        if lat is None or lon is None:
            return
        try:
            fix = Position(float(lat), float(lon))
        except (TypeError, ValueError):
            logger.debug("Ignoring malformed fix %r", kwargs)
            return
        with self._lock:
            self._last_fix = fix
            self._last_fix_at = self._clock()
            pending = list(self._pending)
        for request in pending:
            request.answered.set()

    def _on_status(self, status_type, status):
        logger.debug("GPS status %s: %s", status_type, status)
        if status_type != "provider-disabled" or status != GPS_PROVIDER:
            return
        with self._lock:
            pending = list(self._pending)
        for request in pending:
            request.error = "Location provider is disabled"
            request.answered.set()

    def _cached(self, maximum_age: float) -> Optional[Position]:
        with self._lock:
            if self._last_fix is None or self._last_fix_at is None:
                return None
            if self._clock() - self._last_fix_at <= maximum_age:
                return self._last_fix
        return None

    def _start_gps(self) -> None:
        try:
            self._gps.configure(on_location=self._on_location, on_status=self._on_status)
            # minTime in ms, minDistance in meters
            self._gps.start(minTime=1000, minDistance=0)
        except NotImplementedError as exc:
            raise PositionError("GPS is not available on this platform") from exc
        except Exception as exc:
            raise PositionError(f"Unable to start GPS: {exc}") from exc
        self._active = True

    def get_current_position(self, timeout: float = 30.0, maximum_age: float = 10.0) -> Position:
        cached = self._cached(maximum_age)
        if cached is not None:
            return cached

        request = _Request()
        with self._lock:
            first = not self._pending
            self._pending.add(request)
        try:
            if first:
                self._start_gps()
            if not request.answered.wait(timeout):
                raise PositionError(f"Location request timed out after {timeout:g} seconds")
            if request.error:
                raise PositionError(request.error)
            with self._lock:
                fix = self._last_fix
            if fix is None:
                raise PositionError("No location fix available")
            return fix
        finally:
            with self._lock:
                self._pending.discard(request)
                last = not self._pending
            if last:
                self.stop_observing()

    def stop_observing(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            self._gps.stop()
        except Exception:
            logger.exception("Failed to stop GPS")
