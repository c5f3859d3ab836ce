"""Deployment log endpoint.

Endpoint Summary:
    GET /namespaces/{namespace}/deploymentconfigs/{name}/log
        Stream the log of a deployment config's deployment. Depending on the
        deployment status this is the deployer pod's log or the log of one
        of the application pods.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger
from pydantic import ValidationError
from starlette.responses import JSONResponse, Response, StreamingResponse

from src.app.api.http.deps import get_deployment_log_service
from src.app.api.http.schemas.deploylog import DeploymentLogErrorResponse
from src.app.core.services.deploylog.errors import (
    DeploymentLogError,
    InvalidOptions,
    NotFoundError,
    RequestCancelled,
    ServerTimeoutError,
)
from src.app.core.services.deploylog.models import DeploymentLogOptions
from src.app.core.services.deploylog.service import DeploymentLogService
from src.app.core.services.deploylog.streamer import PassThroughStreamer
from src.infra.k8s.controller import ResourceNotFoundError

router = APIRouter(tags=["deployment logs"])

# Seconds between client disconnect checks while a request is open
DISCONNECT_POLL_INTERVAL = 0.5


def _error_response(error: DeploymentLogError) -> JSONResponse:
    headers = {}
    if isinstance(error, ServerTimeoutError):
        headers["Retry-After"] = str(error.retry_after_seconds)
    return JSONResponse(
        status_code=error.status_code,
        content=DeploymentLogErrorResponse.from_error(error).model_dump(mode="json"),
        headers=headers,
    )


async def _watch_disconnect(request: Request, cancel: asyncio.Event) -> None:
    """Set ``cancel`` once the client goes away."""
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.debug(f"Client disconnected from {request.url.path}")
            cancel.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def relay_log_stream(
    stream: PassThroughStreamer, watcher: asyncio.Task[None]
) -> AsyncIterator[bytes]:
    """Yield the log stream, then stop the disconnect watcher.

    A cancel caused by the client going away ends the body quietly; there
    is nobody left to report it to.
    """
    chunks = aiter(stream)
    try:
        async for chunk in chunks:
            yield chunk
    except RequestCancelled:
        logger.debug("Log stream cancelled, client went away")
    finally:
        watcher.cancel()
        await chunks.aclose()


@router.get(
    "/namespaces/{namespace}/deploymentconfigs/{name}/log",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"text/plain": {}}, "description": "Log stream"},
        400: {"model": DeploymentLogErrorResponse},
        404: {"model": DeploymentLogErrorResponse},
        500: {"model": DeploymentLogErrorResponse},
        504: {"model": DeploymentLogErrorResponse},
    },
    summary="Get deployment logs",
    description="Stream the log of the latest, previous or a specific deployment.",
)
async def get_deployment_log(
    request: Request,
    namespace: str,
    name: str,
    version: int | None = Query(default=None),
    previous: bool = Query(default=False),
    nowait: bool = Query(default=False),
    follow: bool = Query(default=False),
    container: str | None = Query(default=None),
    tail_lines: int | None = Query(default=None, alias="tailLines"),
    since_seconds: int | None = Query(default=None, alias="sinceSeconds"),
    since_time: datetime | None = Query(default=None, alias="sinceTime"),
    timestamps: bool = Query(default=False),
    limit_bytes: int | None = Query(default=None, alias="limitBytes"),
    previous_container: bool = Query(default=False, alias="previousContainer"),
    service: DeploymentLogService = Depends(get_deployment_log_service),
) -> Response:
    """Stream a deployment's log.

    Waits (bounded by the configured timeout) for the deployment to exist
    and, unless ``nowait`` is set, for it to start. Returns an empty body
    when ``nowait`` is set and the deployment has not started.

    Raises:
        Nothing: classified failures are rendered as DeploymentLogErrorResponse
    """
    try:
        options = DeploymentLogOptions(
            version=version,
            previous=previous,
            no_wait=nowait,
            follow=follow,
            container=container,
            tail_lines=tail_lines,
            since_seconds=since_seconds,
            since_time=since_time,
            timestamps=timestamps,
            limit_bytes=limit_bytes,
            previous_container=previous_container,
        )
    except ValidationError as e:
        return _error_response(
            InvalidOptions("invalid deployment log options", details=str(e))
        )

    cancel = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel))
    stream: PassThroughStreamer | None = None
    try:
        stream = await service.get(namespace, name, options, cancel=cancel)
    except DeploymentLogError as e:
        return _error_response(e)
    except ResourceNotFoundError as e:
        return _error_response(NotFoundError(str(e)))
    finally:
        if stream is None:
            watcher.cancel()

    # The watcher keeps running while the body is sent and stops with it
    return StreamingResponse(
        relay_log_stream(stream, watcher), media_type=stream.content_type
    )
