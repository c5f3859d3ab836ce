"""Tests for small Kubernetes helpers."""

import asyncio

import pytest

from src.infra.k8s import DeploymentStatus, get_namespace, run_sync


class TestDeploymentStatusParse:
    @pytest.mark.parametrize("value", ["New", "Pending", "Running", "Failed", "Complete"])
    def test_known_values(self, value):
        assert DeploymentStatus.parse(value).value == value

    @pytest.mark.parametrize("value", [None, "", "Bogus"])
    def test_unknown_values_are_unknown(self, value):
        assert DeploymentStatus.parse(value) == DeploymentStatus.UNKNOWN


class TestGetNamespace:
    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("K8S_NAMESPACE", "from-env")

        assert get_namespace("from-config") == "from-env"

    def test_falls_back_to_given_default(self, monkeypatch):
        monkeypatch.delenv("K8S_NAMESPACE", raising=False)

        assert get_namespace("from-config") == "from-config"
        assert get_namespace() == "default"


class TestRunSync:
    def test_without_running_loop(self):
        async def answer():
            return 42

        assert run_sync(answer()) == 42

    async def test_inside_running_loop(self):
        async def answer():
            await asyncio.sleep(0)
            return "ok"

        assert run_sync(answer()) == "ok"
