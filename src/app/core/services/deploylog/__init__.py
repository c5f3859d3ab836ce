"""Deployment log resolution."""

from .errors import (
    BadRequestError,
    DeploymentLogError,
    ErrorKind,
    InternalError,
    NotFoundError,
    RequestCancelled,
    ServerTimeoutError,
)
from .models import DeploymentLogOptions
from .naming import deployer_pod_name, deployment_name
from .router import LogTarget, TargetKind
from .service import DeploymentLogService
from .streamer import PassThroughStreamer

__all__ = [
    # Service
    "DeploymentLogService",
    "DeploymentLogOptions",
    "PassThroughStreamer",
    "LogTarget",
    "TargetKind",
    # Naming
    "deployment_name",
    "deployer_pod_name",
    # Errors
    "DeploymentLogError",
    "ErrorKind",
    "BadRequestError",
    "NotFoundError",
    "ServerTimeoutError",
    "InternalError",
    "RequestCancelled",
]
