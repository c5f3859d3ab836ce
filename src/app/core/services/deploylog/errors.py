"""Error taxonomy for deployment log resolution.

Every failure is classified into exactly one kind at the point where it is
detected. The kind determines the HTTP status the API layer reports:

    BadRequest      400   bad input, or the deployment cannot produce logs yet
    NotFound        404   the config, or the deployment record, does not exist
    ServerTimeout   504   the record exists but never made progress in time
    InternalError   500   no pod could be picked for an existing deployment
    Cancelled       499   the caller gave up while we were waiting

Errors raised while opening the log stream itself are not wrapped.
"""

from __future__ import annotations

from enum import Enum

from src.infra.constants import DEFAULT_CONSTANTS


class ErrorKind(str, Enum):
    BAD_REQUEST = "BadRequest"
    NOT_FOUND = "NotFound"
    SERVER_TIMEOUT = "ServerTimeout"
    INTERNAL_ERROR = "InternalError"
    CANCELLED = "Cancelled"


class DeploymentLogError(Exception):
    """Base class for classified deployment log failures."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


# =============================================================================
# Kinds
# =============================================================================


class BadRequestError(DeploymentLogError):
    kind = ErrorKind.BAD_REQUEST
    status_code = 400


class NotFoundError(DeploymentLogError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class ServerTimeoutError(DeploymentLogError):
    kind = ErrorKind.SERVER_TIMEOUT
    status_code = 504

    def __init__(
        self,
        message: str,
        details: str | None = None,
        retry_after_seconds: int = DEFAULT_CONSTANTS.SERVER_TIMEOUT_RETRY_AFTER_SECONDS,
    ):
        super().__init__(message, details)
        self.retry_after_seconds = retry_after_seconds


class InternalError(DeploymentLogError):
    kind = ErrorKind.INTERNAL_ERROR
    status_code = 500


class RequestCancelled(DeploymentLogError):
    """Raised when the caller's cancel signal fires during a wait or a copy."""

    kind = ErrorKind.CANCELLED
    status_code = 499


# =============================================================================
# Concrete failures
# =============================================================================


class MissingNamespace(BadRequestError):
    def __init__(self) -> None:
        super().__init__("namespace parameter required.")


class InvalidOptions(BadRequestError):
    pass


class NoDeploymentYet(BadRequestError):
    def __init__(self, config_name: str) -> None:
        super().__init__(f'no deployment exists for deploymentConfig "{config_name}"')


class NoPreviousDeployment(BadRequestError):
    def __init__(self, config_name: str) -> None:
        super().__init__(
            f'no previous deployment exists for deploymentConfig "{config_name}"'
        )


class InvalidVersion(BadRequestError):
    def __init__(self, config_name: str, version: int) -> None:
        self.version = version
        super().__init__(
            f'invalid version for deploymentConfig "{config_name}": {version}'
        )


class DeployerStartFailed(BadRequestError):
    def __init__(self, pod_name: str, reason: object) -> None:
        super().__init__(f"failed to run deployer pod {pod_name}: {reason}")


class DeploymentProgressFailed(BadRequestError):
    def __init__(self, deployment_label: str, reason: object) -> None:
        super().__init__(
            f"unable to wait for deployment {deployment_label} to run: {reason}"
        )


class ConfigNotFound(NotFoundError):
    def __init__(self, config_name: str) -> None:
        super().__init__(f'deploymentconfig "{config_name}" not found')


class DeploymentNotFound(NotFoundError):
    def __init__(self, deployment_name: str) -> None:
        super().__init__(f'replicationcontrollers "{deployment_name}" not found')


class ProgressTimeout(ServerTimeoutError):
    def __init__(self, deployment_label: str) -> None:
        super().__init__(
            "the server was unable to return a response in the time allotted "
            f"(get replicationcontrollers {deployment_label})"
        )


class NoCandidateProcess(InternalError):
    def __init__(self, deployment_name: str, selector: str) -> None:
        super().__init__(
            f"no pods found for deployment {deployment_name}",
            details=f"selector: {selector}",
        )
