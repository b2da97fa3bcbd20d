import pytest
from fastapi.testclient import TestClient

from pirain.config import RainSettings
from pirain.server import create_app
from pirain.storage_orm import Storage


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "db" / "rain.db")


@pytest.fixture
def storage(db_path):
    s = Storage(db_path)
    yield s
    s.close()


@pytest.fixture
def settings(db_path):
    return RainSettings(db_path=db_path, rain_interval_ms=20, rain_batch=100)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # The context manager keeps one event loop alive for the whole test,
    # which the rain scheduler needs, and runs the shutdown hook at the end.
    with TestClient(app) as c:
        yield c
