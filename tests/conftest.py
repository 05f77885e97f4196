import pytest
from fastapi.testclient import TestClient

import config
from db import database
from db.database import open_database


@pytest.fixture
def db():
    store = open_database(":memory:")
    yield store
    store.close()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    data_dir = tmp_path / "Recallify"
    data_dir.mkdir()
    for name in ("RECALLIFY_STRICT_PARAMS", "RECALLIFY_PORT", "RECALLIFY_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "CONFIG_DIR", data_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", data_dir / "config.toml")
    monkeypatch.setattr(database, "DATA_DIR", data_dir)
    return data_dir


@pytest.fixture
def client(data_dir):
    from main import app

    with TestClient(app) as test_client:
        yield test_client
