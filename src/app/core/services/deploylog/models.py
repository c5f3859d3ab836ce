"""Request options for deployment logs."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.infra.k8s.controller import PodLogOptions


class DeploymentLogOptions(BaseModel):
    """Options for retrieving the log of a deployment.

    ``version``, ``previous`` and ``no_wait`` drive which deployment and
    which pod are used; every other field is forwarded unchanged to the pod
    log stream.

    Both the snake_case field names and the camelCase names of the API
    (``tailLines``, ``noWait``, ...) are accepted; unknown keys are rejected.

    ``version`` is not range-checked here: whether it is valid depends on the
    config's latest version, which is checked when the version is resolved.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="forbid",
    )

    version: int | None = Field(
        default=None,
        description="Deployment version to show logs for. Overrides 'previous'.",
    )
    previous: bool = Field(
        default=False,
        description="Show logs for the deployment before the latest one",
    )
    no_wait: bool = Field(
        default=False,
        validation_alias=AliasChoices("no_wait", "nowait", "noWait"),
        description="Return immediately if the deployment has not started yet",
    )
    follow: bool = Field(default=False, description="Stream the log as it grows")
    container: str | None = Field(
        default=None, description="Container to read logs from"
    )
    tail_lines: int | None = Field(
        default=None, ge=0, description="Number of lines from the end to show"
    )
    since_seconds: int | None = Field(
        default=None, ge=1, description="Only return logs newer than this many seconds"
    )
    since_time: datetime | None = Field(
        default=None, description="Only return logs after this time"
    )
    timestamps: bool = Field(
        default=False, description="Prefix each line with its timestamp"
    )
    limit_bytes: int | None = Field(
        default=None, ge=1, description="Maximum number of bytes to return"
    )
    previous_container: bool = Field(
        default=False,
        description="Read logs of the previous instance of the container",
    )

    @model_validator(mode="after")
    def _check_since(self) -> DeploymentLogOptions:
        if self.since_seconds is not None and self.since_time is not None:
            raise ValueError("at most one of sinceTime or sinceSeconds may be specified")
        return self

    def to_pod_log_options(self) -> PodLogOptions:
        """Options forwarded to the pod log stream."""
        return PodLogOptions(
            container=self.container,
            follow=self.follow,
            previous=self.previous_container,
            since_seconds=self.since_seconds,
            since_time=self.since_time,
            timestamps=self.timestamps,
            tail_lines=self.tail_lines,
            limit_bytes=self.limit_bytes,
        )
