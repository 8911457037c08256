import logging
import threading

from kivy.utils import platform

try:
    # Available only on Android
    from android.permissions import request_permissions, Permission, check_permission
except Exception:
    request_permissions = None
    Permission = None
    check_permission = None


logger = logging.getLogger(__name__)

# How long to wait for the user to answer a system permission dialog
PROMPT_TIMEOUT = 120.0


def _request_one(permission: str, timeout: float) -> bool:
    if check_permission(permission):
        return True

    answered = threading.Event()
    result = {"granted": False}

    def _on_result(permissions, grants):
        result["granted"] = bool(grants) and all(grants)
        answered.set()

    request_permissions([permission], _on_result)
    if not answered.wait(timeout):
        logger.warning("No answer to permission request for %s", permission)
        return False
    return result["granted"]


def request_location_permission(timeout: float = PROMPT_TIMEOUT) -> bool:
    """Ask for fine and background location access.

    Returns True only if both are granted. Blocks the calling thread while the
    system dialogs are shown, so never call it from the Kivy main thread on
    Android. Other platforms have no runtime permissions and always succeed.
    """
    if platform != "android":
        return True
    if not (request_permissions and Permission and check_permission):
        logger.error("Android permission API is unavailable")
        return False

    try:
        # Background access has to be requested after foreground access
        fine_granted = _request_one(Permission.ACCESS_FINE_LOCATION, timeout)
        background_granted = _request_one(Permission.ACCESS_BACKGROUND_LOCATION, timeout)
    except Exception:
        logger.exception("Permission request error")
        return False

    if fine_granted and background_granted:
        logger.info("Location permissions granted.")
        return True
    logger.warning("Location permissions denied.")
    return False
