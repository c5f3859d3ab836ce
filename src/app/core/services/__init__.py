"""Core services exports."""

# Deployment Log Service
from .deploylog import (
    DeploymentLogError,
    DeploymentLogOptions,
    DeploymentLogService,
    PassThroughStreamer,
)

__all__ = [
    "DeploymentLogError",
    "DeploymentLogOptions",
    "DeploymentLogService",
    "PassThroughStreamer",
]
