from __future__ import annotations

import asyncio
import shlex
import time
from typing import List, Optional

from docker_service.errors import CommandError
from docker_service.logger import EventLogger
from docker_service.models import CommandResult


class DockerClient:
    """Runs docker CLI commands to completion.

    Only the handful of subcommands the service needs are wrapped; each one
    is a plain passthrough without retries.
    """

    def __init__(
        self,
        timeout_sec: float = 120,
        pull_timeout_sec: float = 900,
        logger: Optional[EventLogger] = None,
    ):
        self.timeout_sec = timeout_sec
        self.pull_timeout_sec = pull_timeout_sec
        self.logger = logger

    async def _run(self, args: List[str], timeout: Optional[float] = None) -> CommandResult:
        command = " ".join(shlex.quote(a) for a in args)
        start = time.time()
        result: Optional[CommandResult] = None
        try:
            try:
                proc = await asyncio.create_subprocess_exec(
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                result = CommandResult(
                    command=command,
                    exit_code=127,
                    stderr=str(exc),
                    duration_sec=time.time() - start,
                )
                return result
            try:
                stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout or self.timeout_sec)
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
                result = CommandResult(
                    command=command,
                    exit_code=None,
                    duration_sec=time.time() - start,
                    timed_out=True,
                )
                return result
            result = CommandResult(
                command=command,
                exit_code=proc.returncode,
                stdout=stdout.decode("utf-8", errors="replace"),
                stderr=stderr.decode("utf-8", errors="replace"),
                duration_sec=time.time() - start,
                timed_out=False,
            )
            return result
        finally:
            if self.logger:
                self.logger.debug(
                    "docker command finished",
                    stage="docker",
                    data={
                        "command": command,
                        "exit_code": result.exit_code if result else None,
                        "timed_out": result.timed_out if result else False,
                    },
                )

    async def _check(self, args: List[str], timeout: Optional[float] = None) -> CommandResult:
        result = await self._run(args, timeout=timeout)
        if not result.ok:
            raise CommandError(result)
        return result

    async def run_command(self, args: List[str]) -> str:
        """Run ``args`` and return stdout, raising ``CommandError`` on failure."""
        result = await self._check(args)
        return result.stdout

    async def inspect_image(self, image: str) -> CommandResult:
        return await self._check(["docker", "inspect", image])

    async def pull_image(self, image: str) -> CommandResult:
        return await self._check(["docker", "pull", image], timeout=self.pull_timeout_sec)

    async def stop_container(self, container: str) -> CommandResult:
        return await self._check(["docker", "stop", container])

    async def remove_container(self, container: str) -> CommandResult:
        return await self._check(["docker", "rm", container])
