"""Shared test fixtures.

FakeCluster is an in-memory KubernetesController. Deployment records and
pods can be given a sequence of states: each read returns the next state
and the last one repeats, which stands in for the control plane creating
and advancing objects between polls. ``None`` in a sequence means "not
found" for that read.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime
from typing import TypeVar

import pytest

from src.app.core.services.deploylog.service import DeploymentLogService
from src.app.runtime.config.config_data import DeployLogSettings
from src.infra.k8s.controller import (
    DeploymentConfigInfo,
    DeploymentInfo,
    DeploymentStatus,
    KubernetesController,
    PodInfo,
    PodLogOptions,
    ResourceNotFoundError,
)

T = TypeVar("T")

NAMESPACE = "test"


class FakeCluster(KubernetesController):
    def __init__(self, namespace: str = NAMESPACE) -> None:
        self.namespace = namespace
        self.configs: dict[str, DeploymentConfigInfo] = {}
        self.app_pods: list[PodInfo] = []
        self.logs: dict[str, list[bytes]] = {}
        self.errors: dict[str, Exception] = {}
        self.opened: list[tuple[str, PodLogOptions]] = []
        self.reads: dict[str, int] = {}
        self.namespaces_seen: list[str] = []
        self._deployments: dict[str, list[DeploymentInfo | None]] = {}
        self._pods: dict[str, list[PodInfo | None]] = {}

    # -- setup ---------------------------------------------------------------

    def add_config(self, name: str, latest_version: int) -> None:
        self.configs[name] = DeploymentConfigInfo(self.namespace, name, latest_version)

    def make_deployment(self, name: str, status: DeploymentStatus) -> DeploymentInfo:
        return DeploymentInfo(
            namespace=self.namespace,
            name=name,
            status=status,
            selector={"deployment": name},
        )

    def set_deployment(self, name: str, *states: DeploymentStatus | None) -> None:
        self._deployments[name] = [
            None if status is None else self.make_deployment(name, status)
            for status in states
        ]

    def set_pod(self, name: str, *phases: str | None) -> None:
        self._pods[name] = [
            None if phase is None else PodInfo(name=name, phase=phase)
            for phase in phases
        ]

    def add_app_pod(
        self,
        deployment: str,
        name: str,
        phase: str,
        created: datetime | None = None,
        labels: dict[str, str] | None = None,
    ) -> None:
        self.app_pods.append(
            PodInfo(
                name=name,
                phase=phase,
                creation_timestamp=created,
                labels=labels if labels is not None else {"deployment": deployment},
            )
        )

    # -- stores --------------------------------------------------------------

    def _count(self, key: str) -> None:
        self.reads[key] = self.reads.get(key, 0) + 1

    def _raise_if_failing(self, method: str) -> None:
        if method in self.errors:
            raise self.errors[method]

    @staticmethod
    def _next(states: list[T | None]) -> T | None:
        if len(states) > 1:
            return states.pop(0)
        return states[0]

    async def get_deployment_config(
        self, namespace: str, name: str
    ) -> DeploymentConfigInfo:
        self.namespaces_seen.append(namespace)
        self._raise_if_failing("get_deployment_config")
        if name not in self.configs:
            raise ResourceNotFoundError("deploymentconfig", name)
        return self.configs[name]

    async def get_deployment(self, namespace: str, name: str) -> DeploymentInfo:
        self._count(f"deployment/{name}")
        self._raise_if_failing("get_deployment")
        record = self._next(self._deployments.get(name, [None]))
        if record is None:
            raise ResourceNotFoundError("replicationcontroller", name)
        return record

    async def get_pod(self, namespace: str, name: str) -> PodInfo:
        self._count(f"pod/{name}")
        self._raise_if_failing("get_pod")
        pod = self._next(self._pods.get(name, [None]))
        if pod is None:
            raise ResourceNotFoundError("pod", name)
        return pod

    async def list_pods(self, namespace: str, label_selector: str) -> list[PodInfo]:
        self._raise_if_failing("list_pods")
        wanted = dict(
            term.split("=", 1) for term in label_selector.split(",") if term
        )
        return [
            pod
            for pod in self.app_pods
            if all(pod.labels.get(k) == v for k, v in wanted.items())
        ]

    async def open_log_stream(
        self, namespace: str, name: str, options: PodLogOptions
    ) -> AsyncIterator[bytes]:
        self._raise_if_failing("open_log_stream")
        self.opened.append((name, options))
        return self._iter_log(name)

    async def _iter_log(self, name: str) -> AsyncIterator[bytes]:
        for chunk in self.logs.get(name, []):
            yield chunk


@pytest.fixture
def cluster() -> FakeCluster:
    """An empty in-memory cluster."""
    return FakeCluster()


@pytest.fixture
def fast_settings() -> DeployLogSettings:
    """Settings with short waits so timeouts are reached quickly."""
    return DeployLogSettings(interval_seconds=0.01, timeout_seconds=0.2)


@pytest.fixture
def service(cluster: FakeCluster, fast_settings: DeployLogSettings) -> DeploymentLogService:
    """A DeploymentLogService reading from the fake cluster."""
    return DeploymentLogService(cluster, cluster, cluster, fast_settings)
