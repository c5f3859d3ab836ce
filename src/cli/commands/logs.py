"""Deployment log commands.

Streams the log of a deployment config's latest, previous or a specific
deployment to stdout, the way ``oc logs dc/NAME`` does.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, BinaryIO

import typer
from loguru import logger

from src.app.core.services.deploylog.models import DeploymentLogOptions
from src.app.core.services.deploylog.service import DeploymentLogService
from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.config.config_loader import load_config
from src.infra.k8s import get_k8s_controller, get_namespace, run_sync

from ..shared.console import console, with_error_handling

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600}


def parse_duration(value: str) -> int:
    """Parse a duration like '30s', '5m' or '2h' into whole seconds."""
    value = value.strip()
    unit = value[-1:]
    if unit in _DURATION_UNITS:
        number = value[:-1]
        multiplier = _DURATION_UNITS[unit]
    else:
        number = value
        multiplier = 1
    try:
        return int(float(number) * multiplier)
    except ValueError:
        raise typer.BadParameter(f"invalid duration: {value!r}") from None


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _load_settings(config_path: Path | None) -> ConfigData:
    if config_path is None:
        from src.app.runtime.context import get_config

        return get_config()
    return load_config(config_path)


async def stream_logs(
    service: DeploymentLogService,
    namespace: str,
    name: str,
    options: DeploymentLogOptions | dict[str, object],
    out: BinaryIO,
) -> int:
    """Copy a deployment's log to ``out``.

    Returns:
        Number of bytes written
    """
    stream = await service.get(namespace, name, options)
    if stream.is_empty:
        console.info(f"Deployment for {namespace}/{name} has not started yet")

    written = 0
    async for chunk in stream:
        out.write(chunk)
        if stream.flush:
            out.flush()
        written += len(chunk)
    out.flush()
    return written


@with_error_handling
def logs(
    name: Annotated[str, typer.Argument(help="Deployment config name")],
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace (default: from config)"),
    ] = None,
    version: Annotated[
        int | None, typer.Option("--version", help="Deployment version to show")
    ] = None,
    previous: Annotated[
        bool, typer.Option("--previous", help="Show the previous deployment")
    ] = False,
    no_wait: Annotated[
        bool,
        typer.Option("--no-wait", help="Don't wait for a pending deployment to start"),
    ] = False,
    follow: Annotated[
        bool, typer.Option("--follow", "-f", help="Stream the log as it grows")
    ] = False,
    container: Annotated[
        str | None, typer.Option("--container", "-c", help="Container name")
    ] = None,
    tail: Annotated[
        int | None, typer.Option("--tail", help="Lines from the end to show")
    ] = None,
    since: Annotated[
        str | None,
        typer.Option("--since", help="Only logs newer than a duration (e.g. 5m)"),
    ] = None,
    timestamps: Annotated[
        bool, typer.Option("--timestamps", help="Include timestamps")
    ] = False,
    limit_bytes: Annotated[
        int | None, typer.Option("--limit-bytes", help="Maximum bytes to return")
    ] = None,
    previous_container: Annotated[
        bool,
        typer.Option(
            "--previous-container",
            help="Logs of the previous instance of the container",
        ),
    ] = False,
    config_path: Annotated[
        Path | None, typer.Option("--config", help="Path to config.yaml")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
) -> None:
    """Print the log of a deployment config's deployment."""
    _configure_logging(verbose)
    config = _load_settings(config_path)
    resolved_namespace = namespace or get_namespace(config.kubernetes.namespace)

    options: dict[str, object] = {
        "version": version,
        "previous": previous,
        "no_wait": no_wait,
        "follow": follow,
        "container": container,
        "tail_lines": tail,
        "since_seconds": parse_duration(since) if since else None,
        "timestamps": timestamps,
        "limit_bytes": limit_bytes,
        "previous_container": previous_container,
    }

    controller = get_k8s_controller()
    service = DeploymentLogService(controller, controller, controller, config.deploylog)
    logger.info(f"Fetching logs for deploymentconfig {resolved_namespace}/{name}")

    run_sync(
        stream_logs(
            service,
            resolved_namespace,
            name,
            options,
            typer.get_binary_stream("stdout"),
        )
    )
