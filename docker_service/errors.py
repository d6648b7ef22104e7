from __future__ import annotations

from typing import Optional

from docker_service.models import CommandResult


class DockerServiceError(Exception):
    """Base class for every error raised by docker_service."""


class ConfigurationError(DockerServiceError):
    pass


class NoStaleContainer(DockerServiceError):
    def __init__(self, cidfile: str, reason: str = "") -> None:
        self.cidfile = cidfile
        self.reason = reason
        message = f"No stale container recorded in {cidfile}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CommandError(DockerServiceError):
    def __init__(self, result: CommandResult) -> None:
        self.result = result
        if result.timed_out:
            detail = "timed out"
        else:
            detail = f"exited with {result.exit_code}"
        stderr = result.stderr.strip()
        message = f"`{result.command}` {detail}"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)


class ImagePullFailure(DockerServiceError):
    def __init__(self, image: str, result: Optional[CommandResult] = None) -> None:
        self.image = image
        self.result = result
        message = f"Failed to pull image {image}"
        if result is not None and result.stderr.strip():
            message = f"{message}: {result.stderr.strip()}"
        super().__init__(message)


class HealthCheckTimeout(DockerServiceError):
    def __init__(self, url: str, attempts: int, elapsed_sec: float) -> None:
        self.url = url
        self.attempts = attempts
        self.elapsed_sec = elapsed_sec
        super().__init__(
            f"Health check {url} did not succeed after {attempts} attempt(s) in {elapsed_sec:.1f}s"
        )


class ProcessSpawnFailure(DockerServiceError):
    def __init__(self, command: str, cause: Optional[BaseException] = None) -> None:
        self.command = command
        self.cause = cause
        message = f"Failed to spawn `{command}`"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ServiceAlreadyRunning(DockerServiceError):
    def __init__(self, image: str) -> None:
        self.image = image
        super().__init__(f"A container for {image} is already running; stop() it before running again")
