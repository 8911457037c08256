#!/usr/bin/env python
"""Initialize the GeoTrack database and report what it holds."""

import os
import sys

from sqlalchemy import func

from .app import create_app, db
from .models import Location


def create_tables() -> None:
    """Create all database tables."""
    print("Creating database tables...")
    try:
        db.create_all()
        print("✓ Tables created")
    except Exception as e:  # noqa: BLE001
        print(f"✗ Table creation failed: {e}")
        sys.exit(1)


def report_locations() -> int:
    """Print how many samples are stored and the most recent one."""
    count = db.session.query(func.count(Location.id)).scalar() or 0
    print(f"Stored locations: {count}")
    latest = db.session.query(Location).order_by(Location.created_at.desc(), Location.id.desc()).first()
    if latest:
        print(f"  Latest: {latest.latitude}, {latest.longitude} at {latest.created_at.isoformat()}Z")
    return count


def main() -> None:
    """Run initialization."""
    print("=== GeoTrack Database Initialization ===\n")

    env = os.environ.get('FLASK_ENV', 'production')
    app = create_app(env)

    with app.app_context():
        print(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
        create_tables()
        report_locations()

    print("\n=== Initialization Complete ===")
    print("Next steps:")
    print("1. Start the server: gunicorn wsgi:app")
    print("2. Point the app at it with GEOTRACK_BASE_URL or config.json")


if __name__ == '__main__':
    main()
