from __future__ import annotations

from src.app.core.services.deploylog.errors import (
    InvalidVersion,
    NoDeploymentYet,
    NoPreviousDeployment,
)
from src.infra.k8s.controller import DeploymentConfigInfo


def resolve_version(
    config: DeploymentConfigInfo,
    version: int | None = None,
    previous: bool = False,
) -> int:
    """Pick the deployment version whose logs were asked for.

    An explicit ``version`` always wins over ``previous``; without either the
    latest version is used.

    Args:
        config: The deployment config
        version: Explicit version, if any
        previous: Use the version before the latest one

    Returns:
        The desired version, always >= 1

    Raises:
        NoDeploymentYet: The config has never been deployed
        NoPreviousDeployment: ``previous`` was asked for on the first deployment
        InvalidVersion: ``version`` is outside ``1..latest_version``
    """
    latest = config.latest_version
    if latest == 0:
        raise NoDeploymentYet(config.name)

    if version is None:
        if not previous:
            return latest
        if latest - 1 < 1:
            raise NoPreviousDeployment(config.name)
        return latest - 1

    if version <= 0 or version > latest:
        raise InvalidVersion(config.name, version)
    return version
