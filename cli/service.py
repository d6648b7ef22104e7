from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
import yaml

sys.path.append(str(Path(__file__).resolve().parents[1]))

from docker_service.errors import ConfigurationError, DockerServiceError
from docker_service.logger import EventLogger
from docker_service.models import CleanupStatus, ServiceConfig
from docker_service.service import DockerService


app = typer.Typer(add_completion=False, help="Run a docker-backed test dependency")


def load_service(cfg_path: Path, log_dir: Optional[Path] = None) -> ServiceConfig:
    data = yaml.safe_load(cfg_path.read_text()) or {}
    service = data.get("service")
    if not service:
        raise ConfigurationError(f"No service defined in {cfg_path}")
    service = dict(service)
    if log_dir is not None and not service.get("log_path"):
        service["log_path"] = str(log_dir / "docker.log")
    try:
        return ServiceConfig.model_validate(service)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def build_logger(log_dir: Optional[Path], debug: bool) -> EventLogger:
    events_path = log_dir / "events.log" if log_dir is not None else None
    return EventLogger(events_path, name="docker-service", echo=debug)


async def _up(service: DockerService) -> int:
    try:
        await service.run()
    except DockerServiceError as exc:
        typer.secho(f"FAILURE: {exc}", fg=typer.colors.RED)
        await service.stop()
        return 1
    typer.secho(f"RUNNING: {service.config.image}", fg=typer.colors.GREEN)
    try:
        code = await service.wait()
    finally:
        await service.stop()
    typer.echo(f"container exited with {code}")
    return 0


def _read_config(config: Path, log_dir: Optional[Path]) -> ServiceConfig:
    if not config.is_file():
        typer.secho(f"Config not found: {config}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        return load_service(config, log_dir)
    except ConfigurationError as exc:
        typer.secho(f"Invalid config: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command()
def up(
    config: Path = typer.Option(..., "--config", help="Path to service YAML."),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for events.log and docker.log"),
) -> None:
    """Start the container, wait until it is healthy and keep it up until interrupted."""
    service_cfg = _read_config(config, log_dir)
    service = DockerService(service_cfg, logger=build_logger(log_dir, service_cfg.debug))
    try:
        code = asyncio.run(_up(service))
    except KeyboardInterrupt:
        asyncio.run(service.stop())
        code = 0
    if code:
        raise typer.Exit(code=code)


@app.command()
def cleanup(
    config: Path = typer.Option(..., "--config", help="Path to service YAML."),
) -> None:
    """Remove a container left behind by a previous run, if any."""
    service_cfg = _read_config(config, None)
    service = DockerService(service_cfg, logger=build_logger(None, service_cfg.debug))
    status = asyncio.run(service.reclaimer.cleanup())
    if status == CleanupStatus.cleaned:
        typer.secho(f"Removed stale container recorded in {service.cidfile}", fg=typer.colors.GREEN)
    else:
        typer.echo(f"Nothing to clean ({service.cidfile})")


if __name__ == "__main__":
    app()
