from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from imtti.database import Database
from imtti.main import create_app


@pytest.fixture()
def static_dir(tmp_path) -> Path:
    """A throwaway frontend folder with an entry document and one asset."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_text("<html><body>IMTTI shell</body></html>", encoding="utf-8")
    (root / "app.js").write_text("console.log('imtti');", encoding="utf-8")
    return root


@pytest.fixture()
def database(tmp_path) -> Database:
    """A fresh SQLite database per test."""
    return Database(f"sqlite:///{tmp_path / 'imtti.db'}")


@pytest.fixture()
def client(database, static_dir):
    """Client for an app whose lifespan connected the store and built the schema."""
    app = create_app(database, static_dir=static_dir, allow_cors=False)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def offline_client(static_dir):
    """Client for an app started without any database credentials."""
    app = create_app(Database(None), static_dir=static_dir, allow_cors=False)
    with TestClient(app) as c:
        yield c
