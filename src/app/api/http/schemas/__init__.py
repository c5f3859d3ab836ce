"""API schema definitions for HTTP endpoints.

This package contains Pydantic models for request/response schemas
used by the HTTP API layer.

Modules:
    deploylog: Deployment log error models
"""

from src.app.api.http.schemas.deploylog import DeploymentLogErrorResponse

__all__ = [
    "DeploymentLogErrorResponse",
]
