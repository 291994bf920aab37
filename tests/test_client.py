# tests/test_client.py
from pathlib import Path

import pytest

from app.services.httpclient import LocalFsApiError, LocalFsClient
from conftest import make_client


@pytest.fixture
def fs_client(tmp_path: Path) -> LocalFsClient:
    return LocalFsClient(token="T1", client=make_client(tmp_path))


def test_client_round_trip(fs_client: LocalFsClient, tmp_path: Path):
    fs_client.setup_auth()

    fs_client.create_directory("docs")
    fs_client.create_file("docs/a.txt", "hello")
    assert fs_client.read_file("docs/a.txt") == "hello"

    fs_client.update_file("docs/a.txt", "world")
    assert fs_client.read_file("docs/a.txt") == "world"

    fs_client.upload_file("docs/b.bin", b"\x00\x10\x20")
    assert fs_client.read_bytes("docs/b.bin") == b"\x00\x10\x20"

    names = sorted(e["name"] for e in fs_client.list_directory("docs"))
    assert names == ["a.txt", "b.bin"]
    assert any(e["name"] == "docs" for e in fs_client.list_directory())

    fs_client.delete_file("docs/a.txt")
    fs_client.delete_file("docs/b.bin")
    fs_client.delete_directory("docs")
    assert not (tmp_path / "docs").exists()


def test_client_surfaces_structured_errors(fs_client: LocalFsClient):
    fs_client.setup_auth()
    with pytest.raises(LocalFsApiError) as ei:
        fs_client.read_file("missing.txt")
    assert ei.value.status == 404
    assert ei.value.code == "NOT_FOUND"

    fs_client.create_directory("d")
    fs_client.create_file("d/x.txt", "x")
    with pytest.raises(LocalFsApiError) as ei:
        fs_client.delete_directory("d")
    assert ei.value.code == "NOT_EMPTY"


def test_client_token_conflict(fs_client: LocalFsClient):
    fs_client.setup_auth()
    with pytest.raises(LocalFsApiError) as ei:
        fs_client.setup_auth("other")
    assert ei.value.status == 409
    # the first token keeps working
    assert fs_client.list_directory() == []


def test_client_requires_token(tmp_path: Path):
    c = LocalFsClient(client=make_client(tmp_path))
    with pytest.raises(ValueError):
        c.list_directory()
