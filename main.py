# Entry point for buildozer / python-for-android
from geotrack.mobile.main import GeoTrackApp


if __name__ == "__main__":
    GeoTrackApp().run()
