"""Deployment log service.

Resolves which pod's log to stream for a deployment config and opens it.

Flow of a request:

1. Resolve the desired version from the config and the options
2. Wait for the deployment record of that version to exist
3. Route on the deployment status (see ``router``), waiting for the
   deployer pod and the deployment to start when needed
4. Pick the deployer pod or an application pod
5. Open that pod's log as a pass-through stream
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from src.app.core.services.deploylog.errors import (
    ConfigNotFound,
    DeployerStartFailed,
    DeploymentLogError,
    DeploymentProgressFailed,
    InvalidOptions,
    MissingNamespace,
    ProgressTimeout,
)
from src.app.core.services.deploylog.models import DeploymentLogOptions
from src.app.core.services.deploylog.naming import (
    deployer_pod_name,
    deployment_name,
    label_for_deployment,
)
from src.app.core.services.deploylog.router import (
    LogTarget,
    RouteAction,
    TargetKind,
    route,
    route_after_progress,
)
from src.app.core.services.deploylog.selector import select_application_pod
from src.app.core.services.deploylog.streamer import (
    PassThroughStreamer,
    open_log_stream,
)
from src.app.core.services.deploylog.versions import resolve_version
from src.app.core.services.deploylog.waiters import (
    wait_for_deployment_progress,
    wait_for_existing_deployment,
    wait_for_running_deployer_pod,
)
from src.app.runtime.config.config_data import DeployLogSettings
from src.infra.k8s.controller import (
    DeploymentConfigInfo,
    DeploymentConfigStore,
    DeploymentInfo,
    DeploymentStore,
    PodStore,
)


class DeploymentLogService:
    """Service returning the log stream of a deployment config.

    Each call to ``get`` resolves its target independently; the service keeps
    no state between requests beyond its settings and stores.

    Example:
        ```python
        service = DeploymentLogService(controller, controller, controller)
        stream = await service.get("my-namespace", "myapp", {"follow": True})
        async for chunk in stream:
            sys.stdout.buffer.write(chunk)
        ```
    """

    def __init__(
        self,
        config_store: DeploymentConfigStore,
        deployment_store: DeploymentStore,
        pod_store: PodStore,
        settings: DeployLogSettings | None = None,
    ) -> None:
        """Initialize the deployment log service.

        Args:
            config_store: Source of deployment configs
            deployment_store: Source of deployment records
            pod_store: Source of pods and pod logs
            settings: Poll interval, wait timeout and buffer size
        """
        self._configs = config_store
        self._deployments = deployment_store
        self._pods = pod_store
        self._settings = settings or DeployLogSettings()

    @property
    def settings(self) -> DeployLogSettings:
        return self._settings

    # =========================================================================
    # Public API
    # =========================================================================

    async def get(
        self,
        namespace: str,
        name: str,
        options: DeploymentLogOptions | Mapping[str, Any] | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> PassThroughStreamer:
        """Return the log stream for a deployment config.

        Args:
            namespace: Namespace of the deployment config
            name: Deployment config name
            options: Log options, as a model or a raw mapping
            cancel: Optional signal that aborts waits and the stream copy

        Returns:
            PassThroughStreamer over the chosen pod's log; an empty stream if
            the deployment has not started and ``no_wait`` was requested

        Raises:
            DeploymentLogError: Classified failure (see ``errors``)
        """
        if not namespace:
            raise MissingNamespace()
        opts = self._validate_options(options)

        config = await self._get_config(namespace, name)
        version = resolve_version(config, opts.version, opts.previous)

        deployment = await wait_for_existing_deployment(
            self._deployments,
            namespace,
            deployment_name(config.name, version),
            interval=self._settings.interval_seconds,
            timeout=self._settings.timeout_seconds,
            cancel=cancel,
        )

        target = await self.resolve_target(deployment, opts.no_wait, cancel=cancel)
        if target.kind == TargetKind.EMPTY or target.pod_name is None:
            return PassThroughStreamer.empty()

        return await open_log_stream(
            self._pods,
            namespace,
            target.pod_name,
            opts.to_pod_log_options(),
            buffer_size=self._settings.buffer_size,
            cancel=cancel,
        )

    async def resolve_target(
        self,
        deployment: DeploymentInfo,
        no_wait: bool,
        *,
        cancel: asyncio.Event | None = None,
    ) -> LogTarget:
        """Decide which pod's log to read for an existing deployment record."""
        label = label_for_deployment(deployment)
        status = deployment.status
        action = route(status, no_wait)

        if action == RouteAction.EMPTY:
            logger.debug(
                f"Deployment {label} is in {status.value} state. No logs to retrieve yet."
            )
            return LogTarget.empty()

        if action == RouteAction.WAIT_FOR_PROGRESS:
            logger.debug(
                f"Deployment {label} is in {status.value} state, waiting for it to start..."
            )
            latest = await self._wait_for_progress(deployment, cancel)
            action = route_after_progress(latest.status)

        if action == RouteAction.SELECT_APPLICATION:
            return LogTarget.application(
                await select_application_pod(self._pods, deployment)
            )
        return LogTarget.deployer(deployer_pod_name(deployment.name))

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _validate_options(
        self, options: DeploymentLogOptions | Mapping[str, Any] | None
    ) -> DeploymentLogOptions:
        if options is None:
            return DeploymentLogOptions()
        if isinstance(options, DeploymentLogOptions):
            return options
        try:
            return DeploymentLogOptions.model_validate(dict(options))
        except ValidationError as e:
            raise InvalidOptions("invalid deployment log options", details=str(e)) from e

    async def _get_config(self, namespace: str, name: str) -> DeploymentConfigInfo:
        try:
            return await self._configs.get_deployment_config(namespace, name)
        except Exception as e:
            logger.debug(f"Failed to get deploymentconfig {namespace}/{name}: {e}")
            raise ConfigNotFound(name) from e

    async def _wait_for_progress(
        self, deployment: DeploymentInfo, cancel: asyncio.Event | None
    ) -> DeploymentInfo:
        """Wait for the deployer pod, then for the deployment, to start."""
        label = label_for_deployment(deployment)
        timeout = self._settings.timeout_seconds
        interval = self._settings.interval_seconds

        try:
            await wait_for_running_deployer_pod(
                self._pods, deployment, timeout, interval=interval, cancel=cancel
            )
        except DeploymentLogError:
            raise
        except Exception as e:
            raise DeployerStartFailed(deployer_pod_name(deployment.name), e) from e

        try:
            latest, found = await wait_for_deployment_progress(
                self._deployments, deployment, timeout, interval=interval, cancel=cancel
            )
        except DeploymentLogError:
            raise
        except Exception as e:
            raise DeploymentProgressFailed(label, e) from e

        if not found or latest is None:
            raise ProgressTimeout(label)
        return latest
