"""Client settings for the GeoTrack app.

Values come from built-in defaults, then ``config.json`` in the app's
``user_data_dir``, then environment variables.
"""

import json
import logging
import os
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

DEFAULTS: Dict[str, Any] = {
    "server_base_url": "",
    "request_timeout": 15.0,
    # Background loop timings, in seconds
    "upload_delay": 15.0,
    "position_timeout": 30.0,
    "position_maximum_age": 10.0,
}

ENV_OVERRIDES = {
    "GEOTRACK_BASE_URL": "server_base_url",
    "GEOTRACK_REQUEST_TIMEOUT": "request_timeout",
}

TASK_OPTIONS: Dict[str, Any] = {
    "task_name": "Location Tracking",
    "task_title": "Tracking Your Location",
    "task_desc": "Running in background",
    "parameters": {"delay": DEFAULTS["upload_delay"]},
}


def config_path(user_data_dir: str) -> str:
    return os.path.join(user_data_dir, CONFIG_FILENAME)


def _read_file(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f) or {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return {}
    return data


def load_config(user_data_dir: Optional[str] = None) -> Dict[str, Any]:
    cfg = dict(DEFAULTS)
    if user_data_dir:
        file_cfg = _read_file(config_path(user_data_dir))
        cfg.update({k: v for k, v in file_cfg.items() if k in DEFAULTS})

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            cfg[key] = value

    cfg["server_base_url"] = (cfg.get("server_base_url") or "").strip().rstrip("/")
    for key in ("request_timeout", "upload_delay", "position_timeout", "position_maximum_age"):
        try:
            cfg[key] = float(cfg[key])
        except (TypeError, ValueError):
            logger.warning("Invalid %s=%r, using default", key, cfg[key])
            cfg[key] = DEFAULTS[key]
    return cfg


def task_options(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Background task metadata with the configured loop delay."""
    options = dict(TASK_OPTIONS)
    options["parameters"] = {"delay": cfg.get("upload_delay", DEFAULTS["upload_delay"])}
    return options
