"""API routes for the GeoTrack backend.

Upload, list and purge of location samples, plus a health check.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import text

from ..app import db
from ..models import Location


api_bp = Blueprint("api", __name__)

COORDINATE_RANGES = {
    "lat": (-90.0, 90.0),
    "long": (-180.0, 180.0),
}


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _coordinate(data: Dict[str, Any], key: str) -> Tuple[Optional[float], Optional[str]]:
    value = data.get(key)
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None, f"{key} must be a number"
    value = float(value)
    low, high = COORDINATE_RANGES[key]
    if not math.isfinite(value) or not low <= value <= high:
        return None, f"{key} must be between {low:g} and {high:g}"
    return value, None


@api_bp.post("/upload-location")
def upload_location():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Expected a JSON object with lat and long")

    lat, error = _coordinate(data, "lat")
    if error:
        return _json_error(error)
    lon, error = _coordinate(data, "long")
    if error:
        return _json_error(error)

    location = Location(latitude=lat, longitude=lon)
    db.session.add(location)
    db.session.commit()
    current_app.logger.info("Stored location %s: %s, %s", location.id, lat, lon)

    return jsonify({
        "status": "success",
        "location": location.to_dict(),
    }), 201


@api_bp.get("/get-all-locations")
def get_all_locations():
    rows = db.session.query(Location).order_by(Location.created_at.asc(), Location.id.asc()).all()
    return jsonify({
        "locations": [row.to_dict() for row in rows],
        "count": len(rows),
    })


@api_bp.delete("/delete-all-locations")
def delete_all_locations():
    deleted = db.session.query(Location).delete()
    db.session.commit()
    current_app.logger.info("Deleted %s locations", deleted)
    return jsonify({"status": "success", "deleted": deleted})


@api_bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        current_app.logger.exception("Database health check failed")
        db_ok = False
    return jsonify({
        "status": "ok",
        "db": "connected" if db_ok else "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }), (200 if db_ok else 503)
