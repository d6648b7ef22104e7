"""Tests for the default capability implementations."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests

from docker_service.capabilities import LocalFileSystem, SubprocessSpawner, http_ping
from docker_service.errors import ProcessSpawnFailure


def test_http_ping_succeeds_on_ok_response():
    response = MagicMock()
    with patch("docker_service.capabilities.requests.get", return_value=response) as get:
        asyncio.run(http_ping("http://localhost:4444"))

    get.assert_called_once_with("http://localhost:4444", timeout=5.0)
    response.raise_for_status.assert_called_once()


def test_http_ping_fails_on_error_status():
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
    with patch("docker_service.capabilities.requests.get", return_value=response):
        with pytest.raises(requests.HTTPError):
            asyncio.run(http_ping("http://localhost:4444"))


def test_http_ping_fails_when_unreachable():
    with patch("docker_service.capabilities.requests.get", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(requests.ConnectionError):
            asyncio.run(http_ping("http://localhost:4444"))


def test_local_filesystem_read_and_remove(tmp_path):
    fs = LocalFileSystem()
    path = tmp_path / "x.cid"
    path.write_text("123")

    assert asyncio.run(fs.read_text(path)) == "123"
    asyncio.run(fs.remove(path))
    assert not path.exists()
    # removing a missing file is not an error
    asyncio.run(fs.remove(path))


def test_local_filesystem_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        asyncio.run(LocalFileSystem().read_text(tmp_path / "missing.cid"))


def test_spawner_pipes_output():
    proc = MagicMock()
    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as spawn:
        assert asyncio.run(SubprocessSpawner().spawn(["docker", "run", "my-image"])) is proc

    spawn.assert_awaited_once_with(
        "docker", "run", "my-image",
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )


def test_spawner_wraps_os_errors():
    with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("docker"))):
        with pytest.raises(ProcessSpawnFailure, match="docker run my-image"):
            asyncio.run(SubprocessSpawner().spawn(["docker", "run", "my-image"]))
