from __future__ import annotations

import os

from cachetools.func import lru_cache  # type: ignore

from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import KubernetesController


@lru_cache(maxsize=1)
def get_k8s_controller() -> KubernetesController:
    """Get an instance of the KubernetesController.

    Returns:
        An instance of KubernetesController
    """
    from src.infra.k8s.kr8s_controller import Kr8sController

    return Kr8sController()


def get_namespace(default: str | None = None) -> str:
    """Get the Kubernetes namespace from the environment, config or default."""
    return os.environ.get(
        "K8S_NAMESPACE", default or DEFAULT_CONSTANTS.DEFAULT_NAMESPACE
    )
