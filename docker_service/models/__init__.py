from .config import HealthCheckConfig, OptionValue, ServiceConfig, derive_cidfile
from .results import CleanupStatus, CommandResult, ServiceState

__all__ = [
    "HealthCheckConfig",
    "OptionValue",
    "ServiceConfig",
    "derive_cidfile",
    "CleanupStatus",
    "CommandResult",
    "ServiceState",
]
