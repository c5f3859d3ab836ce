"""Application pod selection for completed deployments.

Once a deployment is complete its deployer pod is gone or idle, so logs come
from one of the pods the deployment created. Candidates are ranked by how
useful their log is likely to be:

1. Running pods first, then Unknown, then Pending, then everything else
2. Newer pods before older ones (pods without a timestamp last)
3. Pod name, so the choice is reproducible
"""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

from src.app.core.services.deploylog.errors import InternalError, NoCandidateProcess
from src.infra.k8s.controller import DeploymentInfo, PodInfo, PodPhase, PodStore

_PHASE_RANK: dict[str, int] = {
    PodPhase.RUNNING.value: 0,
    PodPhase.UNKNOWN.value: 1,
    PodPhase.PENDING.value: 2,
}
_OTHER_PHASE_RANK = 3


def format_selector(selector: Mapping[str, str]) -> str:
    """Render an equality selector as a label selector string."""
    return ",".join(f"{key}={selector[key]}" for key in sorted(selector))


def matches_selector(pod: PodInfo, selector: Mapping[str, str]) -> bool:
    return all(pod.labels.get(key) == value for key, value in selector.items())


def loggability_key(pod: PodInfo) -> tuple[int, int, float, str]:
    """Sort key placing the pod with the most useful log first."""
    phase_rank = _PHASE_RANK.get(pod.phase, _OTHER_PHASE_RANK)
    if pod.creation_timestamp is None:
        return phase_rank, 1, 0.0, pod.name
    return phase_rank, 0, -pod.creation_timestamp.timestamp(), pod.name


def rank_pods(pods: list[PodInfo]) -> list[PodInfo]:
    return sorted(pods, key=loggability_key)


async def select_application_pod(store: PodStore, deployment: DeploymentInfo) -> str:
    """Return the name of the best pod to read a deployment's logs from.

    Raises:
        NoCandidateProcess: No pod matches the deployment's selector
        InternalError: The pods could not be listed
    """
    label_selector = format_selector(deployment.selector)
    try:
        pods = await store.list_pods(deployment.namespace, label_selector)
    except Exception as e:
        raise InternalError(
            f"unable to list pods for deployment {deployment.name}: {e}"
        ) from e

    candidates = [pod for pod in pods if matches_selector(pod, deployment.selector)]
    if not candidates:
        raise NoCandidateProcess(deployment.name, label_selector)

    chosen = rank_pods(candidates)[0]
    logger.debug(
        f"Selected pod {chosen.name} ({chosen.phase}) out of {len(candidates)} "
        f"for deployment {deployment.name}"
    )
    return chosen.name
