"""Pydantic schemas for the deployment log endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.app.core.services.deploylog.errors import DeploymentLogError, ErrorKind


class DeploymentLogErrorResponse(BaseModel):
    """Error response for deployment log requests.

    Example:
        ```json
        {
            "kind": "BadRequest",
            "detail": "no deployment exists for deploymentConfig \\"myapp\\"",
            "error_type": "NoDeploymentYet"
        }
        ```
    """

    kind: ErrorKind = Field(description="Error class the failure belongs to")
    detail: str = Field(description="Error message")
    details: str | None = Field(
        default=None,
        description="Additional context, such as the pod selector that matched nothing",
    )
    error_type: str = Field(description="Exception class name")
    retry_after_seconds: int | None = Field(
        default=None,
        description="Suggested delay before retrying, for server timeouts",
    )

    @classmethod
    def from_error(cls, error: DeploymentLogError) -> DeploymentLogErrorResponse:
        return cls(
            kind=error.kind,
            detail=error.message,
            details=error.details,
            error_type=type(error).__name__,
            retry_after_seconds=getattr(error, "retry_after_seconds", None),
        )
