from dataclasses import dataclass

from src.app.core.services import DeploymentLogService
from src.app.runtime.config.config_data import ConfigData
from src.infra.k8s.controller import KubernetesController


@dataclass
class ApplicationDependencies:
    config: ConfigData
    controller: KubernetesController
    deployment_log_service: DeploymentLogService


def build_dependencies(
    config: ConfigData, controller: KubernetesController
) -> ApplicationDependencies:
    """Wire the deployment log service to a cluster controller."""
    return ApplicationDependencies(
        config=config,
        controller=controller,
        deployment_log_service=DeploymentLogService(
            controller, controller, controller, config.deploylog
        ),
    )
