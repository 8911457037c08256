import logging
import os

from kivy.storage.jsonstore import JsonStore


logger = logging.getLogger(__name__)

TRACKING_STATE_KEY = "trackingState"
STORE_FILENAME = "geotrack_state.json"


class TrackingStateStore:
    """Persists whether background tracking should be running.

    The flag is kept as the string ``"true"`` or ``"false"`` under a single
    key so it survives app restarts.
    """

    def __init__(self, user_data_dir: str, filename: str = STORE_FILENAME):
        os.makedirs(user_data_dir, exist_ok=True)
        self._store = JsonStore(os.path.join(user_data_dir, filename))

    def get_raw(self):
        if not self._store.exists(TRACKING_STATE_KEY):
            return None
        return self._store.get(TRACKING_STATE_KEY).get("value")

    def load(self) -> bool:
        return self.get_raw() == "true"

    def save(self, tracking: bool) -> None:
        value = "true" if tracking else "false"
        self._store.put(TRACKING_STATE_KEY, value=value)
        logger.debug("Saved %s=%s", TRACKING_STATE_KEY, value)
