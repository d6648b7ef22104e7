"""Lifecycle of one containerized dependency.

Typical use from a test harness::

    service = DockerService({"image": "selenium/standalone-chrome",
                             "options": {"p": ["4444:4444"]},
                             "health_check": "http://localhost:4444"})
    await service.run()      # cleanup, pull if needed, docker run, health
    ...
    await service.stop()     # kill docker run, reclaim the container
"""

from __future__ import annotations

import asyncio
import inspect
from typing import IO, Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from docker_service.capabilities import (
    FileSystem,
    LineStream,
    LocalFileSystem,
    Ping,
    ProcessHandle,
    ProcessSpawner,
    SubprocessSpawner,
    http_ping,
)
from docker_service.command import build_run_args, build_run_command, format_command
from docker_service.docker_client import DockerClient
from docker_service.errors import ConfigurationError, ProcessSpawnFailure, ServiceAlreadyRunning
from docker_service.health import HealthReporter
from docker_service.images import ImageResolver
from docker_service.logger import EventLogger
from docker_service.models import ServiceConfig, ServiceState
from docker_service.reclaimer import StaleContainerReclaimer

EVENT_PROCESS_CREATED = "process_created"

Listener = Callable[[Any], Any]


def _load_config(config: Union[ServiceConfig, Mapping[str, Any], str, None]) -> ServiceConfig:
    if isinstance(config, ServiceConfig):
        return config
    if isinstance(config, str):
        config = {"image": config}
    if config is None:
        raise ConfigurationError("an image name is required")
    try:
        return ServiceConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


class DockerService:
    def __init__(
        self,
        config: Union[ServiceConfig, Mapping[str, Any], str, None],
        *,
        logger: Optional[EventLogger] = None,
        client: Optional[DockerClient] = None,
        spawner: Optional[ProcessSpawner] = None,
        fs: Optional[FileSystem] = None,
        ping: Optional[Ping] = None,
        reclaimer: Optional[StaleContainerReclaimer] = None,
        images: Optional[ImageResolver] = None,
        health: Optional[HealthReporter] = None,
    ):
        self.config = _load_config(config)
        self.logger = logger
        self.cidfile = self.config.resolved_cidfile()
        self.client = client or DockerClient(logger=logger)
        self.spawner = spawner or SubprocessSpawner()
        self.reclaimer = reclaimer or StaleContainerReclaimer(
            self.cidfile, self.client, fs or LocalFileSystem(), logger=logger
        )
        self.images = images or ImageResolver(self.config.image, self.client, logger=logger)
        self.health = health or HealthReporter(self.config.health_check, ping or http_ping, logger=logger)

        run_parts = dict(
            image=self.config.image,
            cidfile=self.cidfile,
            options=self.config.options,
            command=self.config.command,
            args=self.config.args,
        )
        self.docker_run_command = format_command(build_run_command(**run_parts))
        self._run_args = build_run_args(**run_parts)

        self.process: Optional[ProcessHandle] = None
        self.state = ServiceState.unset
        self._listeners: Dict[str, List[Listener]] = {}
        self._stream_tasks: List[asyncio.Task] = []
        self._watch_task: Optional[asyncio.Task] = None
        self._log_file: Optional[IO[str]] = None

    @property
    def debug(self) -> bool:
        return self.config.debug

    # -- events -------------------------------------------------------------

    def on(self, event: str, callback: Listener) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    async def _emit(self, event: str, payload: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            result = callback(payload)
            if inspect.isawaitable(result):
                await result

    # -- lifecycle ----------------------------------------------------------

    async def run(self) -> ProcessHandle:
        """Start the container and return once it is healthy.

        Order is fixed: stale cleanup, image resolution, spawn, health. A
        failed cleanup never stops the run; a failed pull, spawn or health
        check is raised to the caller.
        """
        if self.process is not None:
            raise ServiceAlreadyRunning(self.config.image)
        self.state = ServiceState.launching
        try:
            status = await self.reclaimer.cleanup()
        except Exception as exc:
            if self.debug and self.logger:
                self.logger.warning("stale container cleanup failed", stage="cleanup", data={"error": str(exc)})
        else:
            if self.debug and self.logger:
                self.logger.debug(f"stale container cleanup: {status.value}", stage="cleanup")

        try:
            await self.images.ensure_present()
            if self.debug and self.logger:
                self.logger.info(f"Docker command: {self.docker_run_command}", stage="start")
            try:
                handle = await self.spawner.spawn(list(self._run_args))
            except OSError as exc:
                raise ProcessSpawnFailure(self.docker_run_command, exc) from exc
        except Exception:
            self.state = ServiceState.unset
            raise

        self.process = handle
        self._attach_streams(handle)
        self._watch_task = asyncio.create_task(self._watch(handle))
        await self._emit(EVENT_PROCESS_CREATED, handle)

        await self.health.wait()
        if self.process is handle:
            self.state = ServiceState.running
        if self.logger:
            self.logger.info("service started", stage="start", data={"image": self.config.image})
        return handle

    async def stop(self) -> None:
        """Kill the live ``docker run`` process, then reclaim its container."""
        handle = self.process
        if handle is not None:
            self.process = None
            try:
                handle.kill()
            except ProcessLookupError:
                pass
            await self._release()
            self.state = ServiceState.stopped
            if self.logger:
                self.logger.info("service stopped", stage="stop", data={"image": self.config.image})
        try:
            await self.reclaimer.cleanup()
        except Exception as exc:
            if self.logger:
                self.logger.warning("container cleanup after stop failed", stage="stop", data={"error": str(exc)})

    async def wait(self) -> Optional[int]:
        """Block until the live process exits; None when nothing is running."""
        handle = self.process
        if handle is None:
            return None
        return await handle.wait()

    async def __aenter__(self) -> "DockerService":
        try:
            await self.run()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, *args) -> None:
        await self.stop()

    # -- helpers ------------------------------------------------------------

    def _attach_streams(self, handle: ProcessHandle) -> None:
        if self.config.log_path is not None:
            self.config.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log_file = self.config.log_path.open("a", encoding="utf-8")
        for name in ("stdout", "stderr"):
            stream = getattr(handle, name, None)
            if stream is not None:
                self._stream_tasks.append(asyncio.create_task(self._drain(stream, name)))

    async def _drain(self, stream: LineStream, name: str) -> None:
        # Always read to EOF so the child never stalls on a full pipe.
        while True:
            raw = await stream.readline()
            if not raw:
                break
            line = raw.decode("utf-8", errors="replace").rstrip("\n")
            if self.debug and self.logger:
                self.logger.container_output(name, line)
            if self._log_file is not None:
                self._log_file.write(f"[{name}] {line}\n")
                self._log_file.flush()

    async def _watch(self, handle: ProcessHandle) -> None:
        code = await handle.wait()
        if self.process is handle:
            self.process = None
            self.state = ServiceState.stopped
            if self.logger:
                self.logger.warning("docker run exited", stage="container", data={"exit_code": code})
            await asyncio.gather(*self._stream_tasks, return_exceptions=True)
            await self._release()

    async def _release(self) -> None:
        tasks = list(self._stream_tasks)
        if self._watch_task is not None and self._watch_task is not asyncio.current_task():
            tasks.append(self._watch_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._stream_tasks = []
        self._watch_task = None
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None
