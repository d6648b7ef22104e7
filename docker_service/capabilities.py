"""Collaborator contracts consumed by the service, with default implementations.

Anything here can be replaced through the ``DockerService`` constructor; the
defaults talk to the real docker binary, the local disk and HTTP.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Protocol, Union, runtime_checkable

import requests

from docker_service.errors import ProcessSpawnFailure

PathLike = Union[str, Path]
Ping = Callable[[str], Awaitable[None]]


@runtime_checkable
class LineStream(Protocol):
    async def readline(self) -> bytes:
        ...


@runtime_checkable
class ProcessHandle(Protocol):
    stdout: Optional[LineStream]
    stderr: Optional[LineStream]

    def kill(self) -> None:
        ...

    async def wait(self) -> int:
        ...


class ProcessSpawner(Protocol):
    async def spawn(self, args: List[str]) -> ProcessHandle:
        ...


class CommandRunner(Protocol):
    async def run_command(self, args: List[str]) -> str:
        ...


class FileSystem(Protocol):
    async def read_text(self, path: PathLike) -> str:
        ...

    async def remove(self, path: PathLike) -> None:
        ...


class SubprocessSpawner:
    """Starts a long-running child with piped stdout/stderr."""

    async def spawn(self, args: List[str]) -> ProcessHandle:
        try:
            return await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            raise ProcessSpawnFailure(" ".join(args), exc) from exc


class LocalFileSystem:
    async def read_text(self, path: PathLike) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def remove(self, path: PathLike) -> None:
        await asyncio.to_thread(Path(path).unlink, missing_ok=True)


async def http_ping(url: str, timeout: float = 5.0) -> None:
    """Return once ``url`` answers with a non-error status, raise otherwise."""

    def _get() -> None:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

    await asyncio.to_thread(_get)
