from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CleanupStatus(str, Enum):
    cleaned = "cleaned"
    nothing_to_clean = "nothing_to_clean"


class ServiceState(str, Enum):
    unset = "unset"
    launching = "launching"
    running = "running"
    stopped = "stopped"


class CommandResult(BaseModel):
    command: str = Field(description="Command string executed.")
    exit_code: Optional[int] = Field(default=None, description="Exit code (None if timeout).")
    stdout: str = Field(default="", description="Captured stdout.")
    stderr: str = Field(default="", description="Captured stderr.")
    duration_sec: float = Field(default=0.0, description="Duration in seconds.")
    started_at: datetime = Field(default_factory=datetime.utcnow, description="Start timestamp.")
    timed_out: bool = Field(default=False, description="True if command timed out.")

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out
