"""Tracking toggle orchestration.

Glues the permission gate, the position provider, the backend client, the
persisted tracking flag and the background runner together. The persisted
flag is only written after the runner accepted a start or stop request.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .background import BackgroundService, ServiceError
from .config import TASK_OPTIONS
from .location import Position, PositionError, PositionProvider
from .permissions import request_location_permission
from .storage import TrackingStateStore
from .sync_manager import ApiError, LocationApiClient


logger = logging.getLogger(__name__)

AlertFn = Callable[[str, str], None]


def _log_alert(title: str, message: str) -> None:
    logger.warning("%s: %s", title, message)


class TrackingController:
    def __init__(
        self,
        api: LocationApiClient,
        positions: PositionProvider,
        store: TrackingStateStore,
        service: BackgroundService,
        request_permission: Callable[[], bool] = request_location_permission,
        alert: Optional[AlertFn] = None,
        on_position: Optional[Callable[[Position], None]] = None,
        on_tracking_changed: Optional[Callable[[bool], None]] = None,
        options: Optional[Dict[str, Any]] = None,
        position_timeout: float = 30.0,
        position_maximum_age: float = 10.0,
    ):
        self._api = api
        self._positions = positions
        self._store = store
        self._service = service
        self._request_permission = request_permission
        self._alert = alert or _log_alert
        self._on_position = on_position
        self._on_tracking_changed = on_tracking_changed
        self._options = options or TASK_OPTIONS
        self._position_timeout = position_timeout
        self._position_maximum_age = position_maximum_age
        self.tracking = False

    def _set_tracking(self, value: bool) -> None:
        self.tracking = value
        if self._on_tracking_changed:
            self._on_tracking_changed(value)

    # --- Permissions ---
    def request_permission(self) -> bool:
        return bool(self._request_permission())

    def confirm_permission(self) -> bool:
        """Request access after the user agreed to the in-app consent dialog."""
        granted = self.request_permission()
        if not granted:
            self._alert(
                "Permission Denied",
                "Please enable location permissions in your device settings to use this feature.",
            )
        return granted

    # --- Sampling loop ---
    def get_location(self) -> Position:
        try:
            position = self._positions.get_current_position(
                timeout=self._position_timeout,
                maximum_age=self._position_maximum_age,
            )
        except PositionError as exc:
            self._alert("Error", str(exc))
            raise
        if self._on_position:
            self._on_position(position)
        return position

    def upload_location(self, latitude: float, longitude: float) -> None:
        try:
            data = self._api.upload_location(latitude, longitude)
        except ApiError as exc:
            logger.error("Upload failed: %s", exc)
            self._alert("Error", "Failed to upload location")
            return
        logger.info("Location uploaded successfully: %s", data)

    def run_iteration(self) -> None:
        # One failed sample never ends the loop
        try:
            position = self.get_location()
            logger.info("Background Location: %s, %s", position.latitude, position.longitude)
            self.upload_location(position.latitude, position.longitude)
        except Exception as exc:
            logger.error("Background Task Error: %s", exc)

    def background_task(self, delay: float) -> None:
        while self._service.is_running():
            self.run_iteration()
            self._service.sleep(delay)

    # --- Start / stop ---
    def start(self) -> bool:
        try:
            self._service.start(self.background_task, self._options)
            self._set_tracking(True)
            self._store.save(True)
        except (ServiceError, OSError) as exc:
            logger.error("Failed to start background service: %s", exc)
            return False
        return True

    def stop(self) -> bool:
        try:
            self._service.stop()
            self._set_tracking(False)
            self._store.save(False)
        except (ServiceError, OSError) as exc:
            logger.error("Failed to stop background service: %s", exc)
            return False
        return True

    def toggle(self) -> bool:
        if not self.request_permission():
            self._alert("Permission Denied", "Location permission is required to use this feature.")
            return False
        if not self.tracking:
            return self.start()
        return self.stop()

    def restore(self) -> bool:
        """Resume tracking if it was on when the app last ran.

        No permission prompt gates the resume.
        """
        try:
            saved = self._store.load()
        except (OSError, ValueError) as exc:
            logger.error("Unable to read saved tracking state: %s", exc)
            return False
        if not saved:
            return False
        return self.start()

    # --- One-shot backend calls ---
    def fetch_locations(self) -> Any:
        try:
            data = self._api.fetch_all_locations()
        except ApiError as exc:
            logger.error("Fetching location error: %s", exc)
            return None
        logger.info("Fetch all locations success: %s", data)
        return data

    def delete_locations(self) -> Any:
        try:
            data = self._api.delete_all_locations()
        except ApiError as exc:
            logger.error("Delete location error: %s", exc)
            return None
        logger.info("Delete all locations successfully: %s", data)
        return data
