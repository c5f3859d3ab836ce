"""Status-driven routing for deployment logs.

The deployment status decides where logs come from:

    New, Pending   nothing to read yet: return an empty stream when the
                   caller does not want to wait, otherwise wait for the
                   deployer pod and the deployment to start
    Running        the deployer pod is working: read its log
    Failed         the deployer pod holds the failure: read its log
    Complete       the deployer is done: read an application pod's log
    Unknown        no recognised phase: read the deployer pod's log

These functions hold no I/O so the transitions can be tested on their own;
DeploymentLogService performs the waits and lookups they ask for.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.infra.k8s.controller import DeploymentStatus


class RouteAction(str, Enum):
    EMPTY = "empty"
    WAIT_FOR_PROGRESS = "wait_for_progress"
    STREAM_DEPLOYER = "stream_deployer"
    SELECT_APPLICATION = "select_application"


class TargetKind(str, Enum):
    EMPTY = "empty"
    DEPLOYER = "deployer"
    APPLICATION = "application"


@dataclass(frozen=True)
class LogTarget:
    """The pod whose log will be streamed, if any."""

    kind: TargetKind
    pod_name: str | None = None

    @classmethod
    def empty(cls) -> LogTarget:
        return cls(TargetKind.EMPTY)

    @classmethod
    def deployer(cls, pod_name: str) -> LogTarget:
        return cls(TargetKind.DEPLOYER, pod_name)

    @classmethod
    def application(cls, pod_name: str) -> LogTarget:
        return cls(TargetKind.APPLICATION, pod_name)


def route(status: DeploymentStatus, no_wait: bool) -> RouteAction:
    """First routing decision, taken on the status found at request time."""
    if status in (DeploymentStatus.NEW, DeploymentStatus.PENDING):
        return RouteAction.EMPTY if no_wait else RouteAction.WAIT_FOR_PROGRESS
    if status == DeploymentStatus.COMPLETE:
        return RouteAction.SELECT_APPLICATION
    return RouteAction.STREAM_DEPLOYER


def route_after_progress(status: DeploymentStatus) -> RouteAction:
    """Routing decision once a new or pending deployment has started."""
    if status == DeploymentStatus.COMPLETE:
        return RouteAction.SELECT_APPLICATION
    return RouteAction.STREAM_DEPLOYER
