"""Reclaim containers left behind by runs that never got to call ``stop``.

``docker run --cidfile`` writes the container id to a sentinel file and
refuses to start while that file exists, so every run begins by reading it,
tearing the recorded container down and deleting the file. The engine may
have reaped the container already; stop/rm failures are expected and only
logged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from docker_service.capabilities import FileSystem
from docker_service.docker_client import DockerClient
from docker_service.errors import CommandError, NoStaleContainer
from docker_service.logger import EventLogger
from docker_service.models import CleanupStatus


class StaleContainerReclaimer:
    def __init__(
        self,
        cidfile: Path,
        client: DockerClient,
        fs: FileSystem,
        logger: Optional[EventLogger] = None,
    ):
        self.cidfile = cidfile
        self.client = client
        self.fs = fs
        self.logger = logger

    async def _read_cid(self) -> str:
        try:
            content = await self.fs.read_text(self.cidfile)
        except OSError as exc:
            raise NoStaleContainer(str(self.cidfile), exc.strerror or str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise NoStaleContainer(str(self.cidfile), "file is not valid text") from exc
        cid = content.strip()
        if not cid:
            raise NoStaleContainer(str(self.cidfile), "file is empty")
        return cid

    async def cleanup(self) -> CleanupStatus:
        try:
            cid = await self._read_cid()
        except NoStaleContainer as exc:
            await self.fs.remove(self.cidfile)
            if self.logger:
                self.logger.debug(str(exc), stage="cleanup")
            return CleanupStatus.nothing_to_clean

        await self.fs.remove(self.cidfile)
        if self.logger:
            self.logger.info("removing stale container", stage="cleanup", data={"container": cid})
        for action in (self.client.stop_container, self.client.remove_container):
            try:
                await action(cid)
            except CommandError as exc:
                if self.logger:
                    self.logger.warning(
                        "stale container teardown step failed",
                        stage="cleanup",
                        data={"container": cid, "error": str(exc)},
                    )
        return CleanupStatus.cleaned
