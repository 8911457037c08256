"""GeoTrack: periodic GPS sampling app and its location backend."""

__version__ = "0.1.0"
