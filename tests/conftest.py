"""Shared fixtures and fakes for GeoTrack tests."""

import os

# Kivy parses sys.argv and configures logging on import unless told not to
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")
os.environ.setdefault("KIVY_LOG_MODE", "PYTHON")

from typing import Generator, List

import pytest
from flask import Flask
from flask.testing import FlaskClient

from geotrack.mobile.location import Position
from geotrack.mobile.storage import TrackingStateStore
from geotrack.mobile.tracking import TrackingController
from geotrack.server.app import create_app, db


class FakeService:
    """Background runner stand-in that runs nothing on its own."""

    def __init__(self, iterations: int = 0):
        self.running = False
        self.iterations = iterations
        self.sleeps: List[float] = []
        self.started_with = None
        self.start_error = None
        self.stop_error = None

    def start(self, task, options):
        if self.start_error:
            raise self.start_error
        self.started_with = (task, options)
        self.running = True

    def stop(self):
        if self.stop_error:
            raise self.stop_error
        self.running = False

    def is_running(self) -> bool:
        if self.iterations <= 0:
            return False
        self.iterations -= 1
        return True

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


class FakePositions:
    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls = []

    def get_current_position(self, timeout, maximum_age):
        self.calls.append((timeout, maximum_age))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeApi:
    def __init__(self):
        self.uploads = []
        self.upload_error = None
        self.fetch_error = None
        self.delete_error = None

    def upload_location(self, latitude, longitude):
        if self.upload_error:
            raise self.upload_error
        self.uploads.append({"lat": latitude, "long": longitude})
        return {"status": "success"}

    def fetch_all_locations(self):
        if self.fetch_error:
            raise self.fetch_error
        return {"locations": self.uploads, "count": len(self.uploads)}

    def delete_all_locations(self):
        if self.delete_error:
            raise self.delete_error
        deleted = len(self.uploads)
        self.uploads = []
        return {"status": "success", "deleted": deleted}


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)


@pytest.fixture
def store(tmp_path) -> TrackingStateStore:
    return TrackingStateStore(str(tmp_path))


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def positions() -> FakePositions:
    return FakePositions([Position(52.37, 4.89)])


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def alerts() -> Recorder:
    return Recorder()


@pytest.fixture
def make_controller(api, positions, store, service, alerts):
    def _make(permission_granted: bool = True, **kwargs) -> TrackingController:
        permission_calls = kwargs.pop("permission_calls", [])

        def _request_permission() -> bool:
            permission_calls.append(True)
            return permission_granted

        return TrackingController(
            api=api,
            positions=positions,
            store=store,
            service=service,
            request_permission=_request_permission,
            alert=alerts,
            **kwargs,
        )

    return _make


@pytest.fixture(name='app')
def app_fixture() -> Generator[Flask, None, None]:
    """Flask app bound to a fresh in-memory database."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(name='client')
def client_fixture(app: Flask) -> FlaskClient:
    return app.test_client()
