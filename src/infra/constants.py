"""Deployment log constants.

This module centralizes the annotation keys, naming suffixes and default
timings shared by the Kubernetes backend and the deployment log service.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DeployLogConstants:
    """Constants for resolving deployment logs.

    All attributes are class-level and immutable.
    """

    # Kubernetes identifiers
    DEFAULT_NAMESPACE: str = "default"
    DEPLOYMENT_CONFIG_API_VERSION: str = "apps.openshift.io/v1"
    DEPLOYMENT_CONFIG_KIND: str = "DeploymentConfig"

    # Annotation carrying the deployment record's phase
    DEPLOYMENT_STATUS_ANNOTATION: str = "openshift.io/deployment.phase"

    # Deployer pod name is "<deployment>-deploy"
    DEPLOYER_POD_SUFFIX: str = "-deploy"

    # Timing (seconds)
    DEFAULT_INTERVAL_SECONDS: float = 1.0
    DEFAULT_TIMEOUT_SECONDS: float = 60.0
    SERVER_TIMEOUT_RETRY_AFTER_SECONDS: int = 2

    # Log stream
    LOG_CONTENT_TYPE: str = "text/plain"
    DEFAULT_BUFFER_SIZE: int = 32 * 1024


DEFAULT_CONSTANTS = DeployLogConstants()
