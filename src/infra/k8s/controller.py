"""Abstract Kubernetes store interfaces.

Defines the read-only contract the deployment log service needs from the
cluster: deployment configs, deployment records (replication controllers)
and pods, including opening a pod's log stream. Backends (kr8s, in-memory
fakes in tests) implement these interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# =============================================================================
# Errors
# =============================================================================


class ResourceNotFoundError(Exception):
    """Raised by a store when the requested object does not exist."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f'{kind} "{name}" not found')


# =============================================================================
# Data Types
# =============================================================================


class DeploymentStatus(str, Enum):
    """Phase of a deployment record, as written by the deployment controller."""

    NEW = "New"
    PENDING = "Pending"
    RUNNING = "Running"
    FAILED = "Failed"
    COMPLETE = "Complete"
    # Annotation missing or not one of the phases above
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> DeploymentStatus:
        """Parse an annotation value, treating missing or unknown values as Unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class PodPhase(str, Enum):
    """Pod lifecycle phases."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class DeploymentConfigInfo:
    """A deployment config and its latest version counter."""

    namespace: str
    name: str
    latest_version: int = 0


@dataclass(frozen=True)
class DeploymentInfo:
    """A deployment record (replication controller) for one config version."""

    namespace: str
    name: str
    status: DeploymentStatus = DeploymentStatus.NEW
    selector: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PodInfo:
    """Information about a Kubernetes pod."""

    name: str
    phase: str = PodPhase.UNKNOWN.value
    creation_timestamp: datetime | None = None
    labels: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PodLogOptions:
    """Options forwarded unchanged to the pod log endpoint."""

    container: str | None = None
    follow: bool = False
    previous: bool = False
    since_seconds: int | None = None
    since_time: datetime | None = None
    timestamps: bool = False
    tail_lines: int | None = None
    limit_bytes: int | None = None


# =============================================================================
# Abstract Stores
# =============================================================================


class DeploymentConfigStore(ABC):
    """Read access to deployment configs."""

    @abstractmethod
    async def get_deployment_config(
        self, namespace: str, name: str
    ) -> DeploymentConfigInfo:
        """Get a deployment config.

        Args:
            namespace: Kubernetes namespace
            name: Deployment config name

        Returns:
            DeploymentConfigInfo for the config

        Raises:
            ResourceNotFoundError: If the config does not exist
        """
        ...


class DeploymentStore(ABC):
    """Read access to deployment records."""

    @abstractmethod
    async def get_deployment(self, namespace: str, name: str) -> DeploymentInfo:
        """Get a deployment record.

        Args:
            namespace: Kubernetes namespace
            name: Deployment record name

        Returns:
            DeploymentInfo with the record's status and selector

        Raises:
            ResourceNotFoundError: If the record does not exist
        """
        ...


class PodStore(ABC):
    """Read access to pods and their logs."""

    @abstractmethod
    async def get_pod(self, namespace: str, name: str) -> PodInfo:
        """Get a single pod.

        Raises:
            ResourceNotFoundError: If the pod does not exist
        """
        ...

    @abstractmethod
    async def list_pods(self, namespace: str, label_selector: str) -> list[PodInfo]:
        """List pods matching a label selector.

        Args:
            namespace: Kubernetes namespace
            label_selector: Label selector (e.g., "deployment=myapp-3")

        Returns:
            List of matching pods, in no particular order
        """
        ...

    @abstractmethod
    async def open_log_stream(
        self,
        namespace: str,
        name: str,
        options: PodLogOptions,
    ) -> AsyncIterator[bytes]:
        """Open a log stream for a pod.

        Errors locating the pod or rejecting the log request are raised
        here, before any bytes are handed out.

        Args:
            namespace: Kubernetes namespace
            name: Pod name
            options: Log options forwarded to the API server

        Returns:
            Async iterator over raw log chunks
        """
        ...


class KubernetesController(DeploymentConfigStore, DeploymentStore, PodStore):
    """All stores the deployment log service reads from, backed by one cluster."""
