"""Structured event log for docker_service.

Every record is one JSON object per line with ``stage`` naming the lifecycle
step that produced it (``cleanup``, ``pull``, ``start``, ``health``, ``stop``,
``docker``) and ``container`` for lines read from the ``docker run`` process.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


class EventLogger:
    """JSON-lines event log, appended to ``path`` and/or echoed to stdout."""

    def __init__(self, path: Optional[Path] = None, name: str = "docker_service", echo: bool = True) -> None:
        self.path = Path(path) if path is not None else None
        self.name = name
        self.echo = echo
        self._lock = threading.Lock()
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(
        self,
        level: str,
        message: str,
        stage: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload = {
            "ts": datetime.utcnow().isoformat() + "Z",
            "logger": self.name,
            "level": level.lower(),
            "stage": stage,
            "message": message,
            "context": context or {},
            "data": data or {},
        }
        line = json.dumps(payload, ensure_ascii=True, default=str)
        with self._lock:
            if self.path is not None:
                with self.path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
        if self.echo:
            print(line, flush=True)

    def debug(self, message: str, stage: Optional[str] = None, context: Optional[Dict[str, Any]] = None, data: Optional[Dict[str, Any]] = None) -> None:
        self.emit("debug", message, stage=stage, context=context, data=data)

    def info(self, message: str, stage: Optional[str] = None, context: Optional[Dict[str, Any]] = None, data: Optional[Dict[str, Any]] = None) -> None:
        self.emit("info", message, stage=stage, context=context, data=data)

    def warning(self, message: str, stage: Optional[str] = None, context: Optional[Dict[str, Any]] = None, data: Optional[Dict[str, Any]] = None) -> None:
        self.emit("warning", message, stage=stage, context=context, data=data)

    def error(self, message: str, stage: Optional[str] = None, context: Optional[Dict[str, Any]] = None, data: Optional[Dict[str, Any]] = None) -> None:
        self.emit("error", message, stage=stage, context=context, data=data)

    def container_output(self, stream: str, line: str) -> None:
        """Record one line the container wrote to ``stream`` (stdout or stderr)."""
        self.emit("debug", line, stage="container", data={"stream": stream})
