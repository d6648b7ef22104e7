from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

OptionValue = Union[bool, str, List[str]]


def derive_cidfile(image: str, cwd: Optional[Path] = None) -> Path:
    """Sentinel path for an image: non-alphanumerics become ``_``, suffixed ``.cid``."""
    base = cwd or Path.cwd()
    name = re.sub(r"\W", "_", image, flags=re.ASCII)
    return base / f"{name}.cid"


class HealthCheckConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(description="URL that answers once the containerized service is ready.")
    interval: float = Field(default=0.5, gt=0, description="Seconds between probes.")
    max_retries: int = Field(default=10, ge=1, description="Failed probes tolerated before giving up.")
    timeout: float = Field(default=15.0, gt=0, description="Upper bound in seconds for the whole check.")
    start_delay: float = Field(default=0.0, ge=0, description="Seconds to wait before the first probe.")


class ServiceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    image: str = Field(description="Docker image to run.")
    options: Dict[str, OptionValue] = Field(
        default_factory=dict, description="docker run options, in the order they should appear."
    )
    command: Optional[str] = Field(default=None, description="Command placed after the image name.")
    args: Optional[str] = Field(default=None, description="Arguments placed after the command.")
    debug: bool = Field(default=False, description="Log the docker command and container output.")
    health_check: Optional[HealthCheckConfig] = Field(
        default=None, description="Readiness probe; a bare URL string is accepted."
    )
    cidfile: Optional[Path] = Field(
        default=None, description="Sentinel file override; derived from the image name when unset."
    )
    log_path: Optional[Path] = Field(
        default=None, description="File that receives container stdout/stderr."
    )

    @field_validator("image")
    @classmethod
    def _image_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("image name must be a non-empty string")
        return value.strip()

    @field_validator("command", "args")
    @classmethod
    def _shell_splittable(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                shlex.split(value)
            except ValueError as exc:
                raise ValueError(f"cannot split {value!r} into arguments: {exc}") from exc
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_scalars(cls, value: Any) -> Any:
        # YAML hands back ints for things like ports
        if not isinstance(value, dict):
            return value
        normalized: Dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(item, (int, float)) and not isinstance(item, bool):
                item = str(item)
            elif isinstance(item, (list, tuple)):
                item = [str(element) for element in item]
            normalized[str(key)] = item
        return normalized

    @field_validator("health_check", mode="before")
    @classmethod
    def _promote_url(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"url": value}
        return value

    def resolved_cidfile(self, cwd: Optional[Path] = None) -> Path:
        if self.cidfile is not None:
            if self.cidfile.is_absolute():
                return self.cidfile
            return (cwd or Path.cwd()) / self.cidfile
        return derive_cidfile(self.image, cwd)
