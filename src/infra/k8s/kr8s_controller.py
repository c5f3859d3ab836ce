"""Kr8s-based implementation of KubernetesController.

Uses the kr8s library for native async Kubernetes operations.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from datetime import datetime
from typing import Any

import kr8s
from kr8s.asyncio.objects import Pod, ReplicationController, new_class
from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS

from .controller import (
    DeploymentConfigInfo,
    DeploymentInfo,
    DeploymentStatus,
    KubernetesController,
    PodInfo,
    PodLogOptions,
    ResourceNotFoundError,
)

DeploymentConfig = new_class(
    kind=DEFAULT_CONSTANTS.DEPLOYMENT_CONFIG_KIND,
    version=DEFAULT_CONSTANTS.DEPLOYMENT_CONFIG_API_VERSION,
    namespaced=True,
)


class Kr8sController(KubernetesController):
    """Kubernetes controller using kr8s library.

    All methods are natively async, leveraging kr8s's async API.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. When using run_sync() which calls asyncio.run(),
    each call creates a new event loop, making the cached API unusable.
    """

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client bound to the running event loop."""
        return await kr8s.asyncio.api()

    # =========================================================================
    # Deployment Config Operations
    # =========================================================================

    async def get_deployment_config(
        self, namespace: str, name: str
    ) -> DeploymentConfigInfo:
        """Get a deployment config and its latest version."""
        api = await self._get_api()
        try:
            dc = await DeploymentConfig.get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError as e:
            raise ResourceNotFoundError("deploymentconfig", name) from e

        return DeploymentConfigInfo(
            namespace=namespace,
            name=dc.metadata.get("name", name),
            latest_version=int(dc.status.get("latestVersion", 0) or 0),
        )

    # =========================================================================
    # Deployment Record Operations
    # =========================================================================

    async def get_deployment(self, namespace: str, name: str) -> DeploymentInfo:
        """Get a deployment record (replication controller)."""
        api = await self._get_api()
        try:
            rc = await ReplicationController.get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError as e:
            raise ResourceNotFoundError("replicationcontroller", name) from e

        annotations = dict(rc.metadata.get("annotations", {}) or {})
        return DeploymentInfo(
            namespace=namespace,
            name=rc.metadata.get("name", name),
            status=DeploymentStatus.parse(
                annotations.get(DEFAULT_CONSTANTS.DEPLOYMENT_STATUS_ANNOTATION)
            ),
            selector=dict(rc.spec.get("selector", {}) or {}),
            annotations=annotations,
        )

    # =========================================================================
    # Pod Operations
    # =========================================================================

    async def get_pod(self, namespace: str, name: str) -> PodInfo:
        """Get a single pod."""
        api = await self._get_api()
        try:
            pod = await Pod.get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError as e:
            raise ResourceNotFoundError("pod", name) from e
        return self._to_pod_info(pod)

    async def list_pods(self, namespace: str, label_selector: str) -> list[PodInfo]:
        """List pods matching a label selector."""
        api = await self._get_api()
        return [
            self._to_pod_info(pod)
            async for pod in Pod.list(
                namespace=namespace, label_selector=label_selector, api=api
            )
        ]

    async def open_log_stream(
        self,
        namespace: str,
        name: str,
        options: PodLogOptions,
    ) -> AsyncIterator[bytes]:
        """Open a pod's log stream, one line per chunk.

        kr8s only sends the log request once the stream is iterated, so the
        first line is read here. A rejected request (unknown container, no
        previous instance) fails now instead of after the caller has started
        relaying.
        """
        api = await self._get_api()
        try:
            pod = await Pod.get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError as e:
            raise ResourceNotFoundError("pod", name) from e

        lines = self._iter_log_lines(pod, options)
        try:
            first = await anext(lines, None)
        except kr8s.NotFoundError as e:
            raise ResourceNotFoundError("pod", name) from e
        return self._resume_log(first, lines)

    async def _resume_log(
        self, first: bytes | None, rest: AsyncGenerator[bytes, None]
    ) -> AsyncIterator[bytes]:
        try:
            if first is None:
                return
            yield first
            async for chunk in rest:
                yield chunk
        finally:
            await rest.aclose()

    async def _iter_log_lines(
        self, pod: Any, options: PodLogOptions
    ) -> AsyncGenerator[bytes, None]:
        async for line in pod.logs(
            container=options.container,
            previous=options.previous,
            since_seconds=options.since_seconds,
            since_time=options.since_time.isoformat() if options.since_time else None,
            timestamps=options.timestamps,
            tail_lines=options.tail_lines,
            limit_bytes=options.limit_bytes,
            follow=options.follow,
        ):
            yield f"{line}\n".encode()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _to_pod_info(self, pod: Any) -> PodInfo:
        """Convert a kr8s Pod into a PodInfo."""
        metadata = pod.metadata
        name = metadata.get("name", "")

        # Parse creation timestamp
        created_at = None
        if creation_ts := metadata.get("creationTimestamp"):
            try:
                created_at = datetime.fromisoformat(creation_ts.replace("Z", "+00:00"))
            except ValueError:
                logger.warning(
                    f"Ignoring unparsable creationTimestamp {creation_ts!r} on pod {name}"
                )

        return PodInfo(
            name=name,
            phase=pod.status.get("phase", "Unknown"),
            creation_timestamp=created_at,
            labels=dict(metadata.get("labels", {}) or {}),
        )
