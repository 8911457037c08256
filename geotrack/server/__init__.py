"""Flask backend storing uploaded GeoTrack locations."""
