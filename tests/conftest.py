# tests/conftest.py
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.di import build_container
from server.http_app import create_http_app

TOKEN = "T1"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


def make_client(root: Path, **overrides) -> TestClient:
    settings = Settings(DATA_ROOT=root, AUTH_TOKEN=None, **overrides)
    return TestClient(create_http_app(build_container(settings)))


@pytest.fixture
def client(tmp_path: Path) -> TestClient:
    c = make_client(tmp_path)
    assert c.post("/api/auth/setup", json={"token": TOKEN}).status_code == 200
    return c
