from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from docker_service.errors import CommandError
from docker_service.models import CleanupStatus, CommandResult
from docker_service.service import DockerService


class FakeStream:
    def __init__(self, lines: Iterable[bytes] = ()):
        self._lines = list(lines)
        self.reads = 0

    async def readline(self) -> bytes:
        self.reads += 1
        if self._lines:
            return self._lines.pop(0)
        return b""


class FakeProcess:
    """Stands in for an asyncio subprocess that runs until killed or exited."""

    def __init__(self, stdout: Iterable[bytes] = (), stderr: Iterable[bytes] = ()):
        self.stdout = FakeStream(stdout)
        self.stderr = FakeStream(stderr)
        self.returncode: Optional[int] = None
        self.kill_calls = 0
        self._exited: Optional[asyncio.Event] = None

    def kill(self) -> None:
        self.kill_calls += 1
        self.exit(-9)

    def exit(self, code: int = 0) -> None:
        self.returncode = code
        if self._exited is not None:
            self._exited.set()

    async def wait(self) -> int:
        if self.returncode is None:
            if self._exited is None:
                self._exited = asyncio.Event()
            await self._exited.wait()
        return self.returncode


class FakeSpawner:
    def __init__(self, process: Optional[FakeProcess] = None):
        self.process = process or FakeProcess()
        self.calls: List[List[str]] = []

    async def spawn(self, args: List[str]) -> FakeProcess:
        self.calls.append(list(args))
        return self.process


class FakeFileSystem:
    def __init__(self, files: Optional[dict] = None):
        self.files = {Path(k): v for k, v in (files or {}).items()}
        self.reads: List[Path] = []
        self.removed: List[Path] = []

    async def read_text(self, path) -> str:
        self.reads.append(Path(path))
        try:
            return self.files[Path(path)]
        except KeyError:
            raise FileNotFoundError(2, "No such file or directory", str(path))

    async def remove(self, path) -> None:
        self.removed.append(Path(path))
        self.files.pop(Path(path), None)


def command_error(command: str, exit_code: int = 1, stderr: str = "") -> CommandError:
    return CommandError(CommandResult(command=command, exit_code=exit_code, stderr=stderr))


def fake_docker_client() -> MagicMock:
    client = MagicMock()
    client.inspect_image = AsyncMock()
    client.pull_image = AsyncMock()
    client.stop_container = AsyncMock()
    client.remove_container = AsyncMock()
    client.run_command = AsyncMock(return_value="")
    return client


@pytest.fixture
def make_service():
    """Build a DockerService whose collaborators are all test doubles."""

    def _make(config="my-image", *, process: Optional[FakeProcess] = None, logger=None, **overrides):
        reclaimer = MagicMock()
        reclaimer.cleanup = AsyncMock(return_value=CleanupStatus.nothing_to_clean)
        images = MagicMock()
        images.ensure_present = AsyncMock(return_value=False)
        health = MagicMock()
        health.wait = AsyncMock(return_value=None)
        kwargs = dict(
            logger=logger,
            client=fake_docker_client(),
            spawner=FakeSpawner(process),
            reclaimer=reclaimer,
            images=images,
            health=health,
        )
        kwargs.update(overrides)
        return DockerService(config, **kwargs)

    return _make
