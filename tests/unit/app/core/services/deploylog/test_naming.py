"""Unit tests for deployment and deployer pod naming."""

from src.app.core.services.deploylog.naming import (
    deployer_pod_name,
    deployment_name,
    label_for_deployment,
)
from src.infra.k8s.controller import DeploymentInfo, DeploymentStatus


class TestNaming:
    def test_deployment_name(self):
        assert deployment_name("myapp", 3) == "myapp-3"

    def test_deployer_pod_name(self):
        assert deployer_pod_name("myapp-3") == "myapp-3-deploy"

    def test_names_do_not_collide(self):
        """A config name ending in digits cannot clash with another version."""
        pairs = [("app", 12), ("app-1", 2), ("app1", 2), ("app-12", 1)]
        names = {deployment_name(config, version) for config, version in pairs}

        assert len(names) == len(pairs)

    def test_label_for_deployment(self):
        deployment = DeploymentInfo(
            namespace="prod", name="myapp-2", status=DeploymentStatus.NEW
        )

        assert label_for_deployment(deployment) == "prod/myapp-2"
