"""Bounded waits on the control plane.

The deployment controller creates deployment records and deployer pods
asynchronously, so a request for logs may arrive before the objects exist or
before they have started. These helpers poll the stores until the objects
reach the state the log service needs, or give up after a timeout.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from src.app.core.services.deploylog.errors import DeploymentNotFound
from src.app.core.services.deploylog.naming import (
    deployer_pod_name,
    label_for_deployment,
)
from src.app.core.services.deploylog.polling import poll_until
from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import (
    DeploymentInfo,
    DeploymentStatus,
    DeploymentStore,
    PodPhase,
    PodStore,
    ResourceNotFoundError,
)

# Phases in which a pod has a log that can be read
LOGGABLE_POD_PHASES = frozenset(
    {PodPhase.RUNNING.value, PodPhase.SUCCEEDED.value, PodPhase.FAILED.value}
)

# Deployment states reached once the deployer pod has started working
STARTED_DEPLOYMENT_STATES = frozenset(
    {DeploymentStatus.RUNNING, DeploymentStatus.COMPLETE, DeploymentStatus.FAILED}
)


class WaitTimeoutError(TimeoutError):
    def __init__(self) -> None:
        super().__init__("timed out waiting for the condition")


class DeploymentDeletedError(Exception):
    def __init__(self, deployment_label: str) -> None:
        super().__init__(f"deployment {deployment_label} was deleted")


async def wait_for_existing_deployment(
    store: DeploymentStore,
    namespace: str,
    name: str,
    *,
    interval: float = DEFAULT_CONSTANTS.DEFAULT_INTERVAL_SECONDS,
    timeout: float = DEFAULT_CONSTANTS.DEFAULT_TIMEOUT_SECONDS,
    cancel: asyncio.Event | None = None,
) -> DeploymentInfo:
    """Wait for a deployment record to exist.

    "Not found" means the controller has not created it yet, so the wait
    goes on. Any other store error ends the wait immediately.

    Raises:
        DeploymentNotFound: The record did not appear within ``timeout``
    """

    async def condition() -> tuple[bool, DeploymentInfo | None]:
        try:
            return True, await store.get_deployment(namespace, name)
        except ResourceNotFoundError:
            return False, None

    result = await poll_until(
        condition, interval=interval, timeout=timeout, cancel=cancel
    )
    if result.error is not None:
        raise result.error
    if result.timed_out or result.value is None:
        raise DeploymentNotFound(name)
    return result.value


async def wait_for_running_deployer_pod(
    store: PodStore,
    deployment: DeploymentInfo,
    timeout: float,
    *,
    interval: float = DEFAULT_CONSTANTS.DEFAULT_INTERVAL_SECONDS,
    cancel: asyncio.Event | None = None,
) -> None:
    """Wait until the deployment's deployer pod has a readable log.

    Raises:
        WaitTimeoutError: The pod did not start within ``timeout``
    """
    pod_name = deployer_pod_name(deployment.name)

    async def condition() -> tuple[bool, None]:
        try:
            pod = await store.get_pod(deployment.namespace, pod_name)
        except ResourceNotFoundError:
            return False, None
        logger.debug(f"Deployer pod {pod_name} is {pod.phase}")
        return pod.phase in LOGGABLE_POD_PHASES, None

    result = await poll_until(
        condition, interval=interval, timeout=timeout, cancel=cancel
    )
    if result.error is not None:
        raise result.error
    if result.timed_out:
        raise WaitTimeoutError()


async def wait_for_deployment_progress(
    store: DeploymentStore,
    deployment: DeploymentInfo,
    timeout: float,
    *,
    interval: float = DEFAULT_CONSTANTS.DEFAULT_INTERVAL_SECONDS,
    cancel: asyncio.Event | None = None,
) -> tuple[DeploymentInfo | None, bool]:
    """Wait until a deployment record is running or finished.

    Returns:
        ``(latest, True)`` once the record is Running, Complete or Failed;
        ``(None, False)`` if it still exists but did not get there in time

    Raises:
        DeploymentDeletedError: The record disappeared while waiting
    """
    label = label_for_deployment(deployment)

    async def condition() -> tuple[bool, DeploymentInfo | None]:
        try:
            latest = await store.get_deployment(deployment.namespace, deployment.name)
        except ResourceNotFoundError as e:
            raise DeploymentDeletedError(label) from e
        return latest.status in STARTED_DEPLOYMENT_STATES, latest

    result = await poll_until(
        condition, interval=interval, timeout=timeout, cancel=cancel
    )
    if result.error is not None:
        raise result.error
    if result.timed_out:
        return None, False
    return result.value, True
