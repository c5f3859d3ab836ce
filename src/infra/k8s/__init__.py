"""Kubernetes infrastructure abstraction layer.

This module provides read-only store interfaces over the cluster objects the
deployment log service needs (deployment configs, replication controllers,
pods and pod logs), with a kr8s-backed implementation.

Example:
    from src.infra.k8s import get_k8s_controller, run_sync

    controller = get_k8s_controller()
    config = run_sync(controller.get_deployment_config("my-namespace", "myapp"))
"""

from .controller import (
    DeploymentConfigInfo,
    DeploymentConfigStore,
    DeploymentInfo,
    DeploymentStatus,
    DeploymentStore,
    KubernetesController,
    PodInfo,
    PodLogOptions,
    PodPhase,
    PodStore,
    ResourceNotFoundError,
)
from .helpers import get_k8s_controller, get_namespace
from .utils import run_sync

__all__ = [
    # Store interfaces
    "KubernetesController",
    "DeploymentConfigStore",
    "DeploymentStore",
    "PodStore",
    # Data classes
    "DeploymentConfigInfo",
    "DeploymentInfo",
    "DeploymentStatus",
    "PodInfo",
    "PodLogOptions",
    "PodPhase",
    # Errors
    "ResourceNotFoundError",
    # Utilities
    "get_k8s_controller",
    "get_namespace",
    "run_sync",
]
