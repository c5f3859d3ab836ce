"""Deterministic names for deployment records and deployer pods."""

from __future__ import annotations

from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import DeploymentInfo


def deployment_name(config_name: str, version: int) -> str:
    """Name of the deployment record created for ``version`` of a config.

    The version is always the trailing ``-<digits>`` segment, so two
    different ``(config_name, version)`` pairs never share a name.
    """
    return f"{config_name}-{version}"


def deployer_pod_name(deployment: str) -> str:
    """Name of the pod that runs the deployment ``deployment``."""
    return f"{deployment}{DEFAULT_CONSTANTS.DEPLOYER_POD_SUFFIX}"


def label_for_deployment(deployment: DeploymentInfo) -> str:
    return f"{deployment.namespace}/{deployment.name}"
