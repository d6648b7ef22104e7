from __future__ import annotations

import asyncio
from typing import Optional

from docker_service.capabilities import Ping
from docker_service.errors import HealthCheckTimeout
from docker_service.logger import EventLogger
from docker_service.models import HealthCheckConfig


class HealthReporter:
    """Polls a readiness URL until it answers or the retry/time budget runs out.

    ``wait`` arms a deadline timer for the duration of the call and releases
    it exactly once on every exit path. Without a configured URL it returns
    straight away and never probes.
    """

    def __init__(self, config: Optional[HealthCheckConfig], ping: Ping, logger: Optional[EventLogger] = None):
        self.config = config
        self.ping = ping
        self.logger = logger
        self._timer: Optional[asyncio.TimerHandle] = None

    async def wait(self) -> None:
        try:
            if self.config is None:
                return
            await self._poll(self.config)
        finally:
            self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _poll(self, config: HealthCheckConfig) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + config.timeout
        expired = asyncio.Event()
        self._timer = loop.call_later(config.timeout, expired.set)

        if config.start_delay:
            await asyncio.sleep(min(config.start_delay, config.timeout))

        attempts = 0
        while not expired.is_set():
            attempts += 1
            try:
                await asyncio.wait_for(self.ping(config.url), timeout=max(deadline - loop.time(), 0.001))
            except Exception as exc:
                if self.logger:
                    self.logger.debug(
                        "health probe failed",
                        stage="health",
                        data={"url": config.url, "attempt": attempts, "error": repr(exc)},
                    )
            else:
                if self.logger:
                    self.logger.info(
                        "service is healthy",
                        stage="health",
                        data={"url": config.url, "attempts": attempts, "elapsed_sec": round(loop.time() - started, 3)},
                    )
                return
            if attempts >= config.max_retries:
                break
            try:
                await asyncio.wait_for(expired.wait(), timeout=config.interval)
            except asyncio.TimeoutError:
                pass

        elapsed = loop.time() - started
        if self.logger:
            self.logger.error(
                "health check gave up",
                stage="health",
                data={"url": config.url, "attempts": attempts, "elapsed_sec": round(elapsed, 3)},
            )
        raise HealthCheckTimeout(config.url, attempts, elapsed)
