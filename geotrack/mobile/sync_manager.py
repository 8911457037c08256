"""HTTP client for the GeoTrack location backend.

The app only issues one-shot calls: nothing is retried or queued, callers
decide whether a failure is logged or shown to the user.
"""

import logging
from typing import Any, Optional

import requests


logger = logging.getLogger(__name__)

UPLOAD_PATH = "/upload-location"
FETCH_PATH = "/get-all-locations"
DELETE_PATH = "/delete-all-locations"


class ApiError(Exception):
    """A backend call failed (network error, timeout or non-2xx status)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class LocationApiClient:
    def __init__(self, base_url: str, timeout: float = 15.0, session: Optional[requests.Session] = None):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        if not self.base_url:
            raise ApiError("Server URL is not configured")
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise ApiError(f"{method} {path} returned HTTP {resp.status_code}", resp.status_code)
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def upload_location(self, latitude: float, longitude: float) -> Any:
        return self._request("POST", UPLOAD_PATH, json={"lat": latitude, "long": longitude})

    def fetch_all_locations(self) -> Any:
        return self._request("GET", FETCH_PATH)

    def delete_all_locations(self) -> Any:
        return self._request("DELETE", DELETE_PATH)
