"""Typed application configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.infra.constants import DEFAULT_CONSTANTS


class AppSettings(BaseModel):
    environment: str = "development"


class KubernetesSettings(BaseModel):
    namespace: str = Field(
        default=DEFAULT_CONSTANTS.DEFAULT_NAMESPACE,
        description="Namespace used when a request does not name one",
    )


class DeployLogSettings(BaseModel):
    """Timing and buffering for deployment log requests.

    Immutable once loaded; every request reads the same values.
    """

    model_config = ConfigDict(frozen=True)

    interval_seconds: float = Field(
        default=DEFAULT_CONSTANTS.DEFAULT_INTERVAL_SECONDS,
        gt=0,
        description="Seconds between polls while waiting on the control plane",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_CONSTANTS.DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Seconds each wait may last before giving up",
    )
    buffer_size: int = Field(
        default=DEFAULT_CONSTANTS.DEFAULT_BUFFER_SIZE,
        ge=1,
        description="Bytes coalesced per chunk when not following",
    )


class ConfigData(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    deploylog: DeployLogSettings = Field(default_factory=DeployLogSettings)
