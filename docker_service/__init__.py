"""Start, health-check and reliably tear down a docker container for a test run."""

__version__ = "0.1.0"

from .capabilities import LocalFileSystem, SubprocessSpawner, http_ping
from .command import build_run_args, build_run_command, format_command
from .docker_client import DockerClient
from .errors import (
    CommandError,
    ConfigurationError,
    DockerServiceError,
    HealthCheckTimeout,
    ImagePullFailure,
    NoStaleContainer,
    ProcessSpawnFailure,
    ServiceAlreadyRunning,
)
from .health import HealthReporter
from .images import ImageResolver
from .logger import EventLogger
from .models import CleanupStatus, CommandResult, HealthCheckConfig, ServiceConfig, ServiceState
from .options import serialize_option, serialize_options
from .reclaimer import StaleContainerReclaimer
from .service import EVENT_PROCESS_CREATED, DockerService

__all__ = [
    "DockerService",
    "EVENT_PROCESS_CREATED",
    "DockerClient",
    "EventLogger",
    "HealthReporter",
    "ImageResolver",
    "StaleContainerReclaimer",
    "LocalFileSystem",
    "SubprocessSpawner",
    "http_ping",
    "build_run_args",
    "build_run_command",
    "format_command",
    "serialize_option",
    "serialize_options",
    "ServiceConfig",
    "HealthCheckConfig",
    "CleanupStatus",
    "CommandResult",
    "ServiceState",
    "DockerServiceError",
    "ConfigurationError",
    "NoStaleContainer",
    "CommandError",
    "ImagePullFailure",
    "HealthCheckTimeout",
    "ProcessSpawnFailure",
    "ServiceAlreadyRunning",
    "__version__",
]
