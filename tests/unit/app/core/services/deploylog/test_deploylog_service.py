"""Unit tests for DeploymentLogService."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from src.app.core.services.deploylog.errors import (
    ConfigNotFound,
    DeployerStartFailed,
    DeploymentNotFound,
    DeploymentProgressFailed,
    ErrorKind,
    InvalidOptions,
    InvalidVersion,
    MissingNamespace,
    NoCandidateProcess,
    NoDeploymentYet,
    NoPreviousDeployment,
    ProgressTimeout,
    RequestCancelled,
)
from src.app.core.services.deploylog.models import DeploymentLogOptions
from src.app.core.services.deploylog.router import TargetKind
from src.app.core.services.deploylog.service import DeploymentLogService
from src.infra.k8s.controller import DeploymentStatus

NEW = DeploymentStatus.NEW
PENDING = DeploymentStatus.PENDING
RUNNING = DeploymentStatus.RUNNING
COMPLETE = DeploymentStatus.COMPLETE
FAILED = DeploymentStatus.FAILED

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class TestDeploymentLogServiceInit:
    def test_default_settings(self, cluster):
        service = DeploymentLogService(cluster, cluster, cluster)

        assert service.settings.interval_seconds == 1.0
        assert service.settings.timeout_seconds == 60.0


class TestGetValidation:
    async def test_missing_namespace(self, service):
        with pytest.raises(MissingNamespace, match="namespace parameter required"):
            await service.get("", "myapp")

    async def test_invalid_options_mapping(self, service, cluster):
        cluster.add_config("myapp", 1)

        with pytest.raises(InvalidOptions) as exc_info:
            await service.get("test", "myapp", {"tail_lines": -5})

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST

    async def test_unknown_option_key(self, service, cluster):
        cluster.add_config("myapp", 1)

        with pytest.raises(InvalidOptions):
            await service.get("test", "myapp", {"bogus": 1})

    async def test_camel_case_options(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", NEW)

        stream = await service.get("test", "myapp", {"noWait": True})

        assert stream.is_empty

    async def test_config_not_found(self, service):
        with pytest.raises(ConfigNotFound) as exc_info:
            await service.get("test", "missing")

        assert exc_info.value.status_code == 404

    async def test_any_config_error_is_not_found(self, service, cluster):
        cluster.errors["get_deployment_config"] = ConnectionError("refused")

        with pytest.raises(ConfigNotFound):
            await service.get("test", "myapp")

    async def test_no_deployment_yet(self, service, cluster):
        cluster.add_config("myapp", 0)

        with pytest.raises(NoDeploymentYet):
            await service.get("test", "myapp")

    async def test_no_previous_deployment(self, service, cluster):
        cluster.add_config("myapp", 1)

        with pytest.raises(NoPreviousDeployment):
            await service.get("test", "myapp", {"previous": True})

    async def test_invalid_version(self, service, cluster):
        cluster.add_config("myapp", 2)

        with pytest.raises(InvalidVersion):
            await service.get("test", "myapp", DeploymentLogOptions(version=3))

    async def test_deployment_record_never_appears(self, service, cluster):
        cluster.add_config("myapp", 2)

        with pytest.raises(DeploymentNotFound, match="myapp-2"):
            await service.get("test", "myapp")


class TestGetRouting:
    async def test_running_streams_deployer_log(self, service, cluster):
        cluster.add_config("myapp", 3)
        cluster.set_deployment("myapp-3", RUNNING)
        cluster.logs["myapp-3-deploy"] = [b"--> Scaling up\n"]

        stream = await service.get("test", "myapp")

        assert await stream.read() == b"--> Scaling up\n"
        assert cluster.opened[0][0] == "myapp-3-deploy"

    async def test_failed_streams_deployer_log(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", FAILED)

        await service.get("test", "myapp")

        assert cluster.opened[0][0] == "myapp-1-deploy"

    @pytest.mark.parametrize("no_wait", [True, False])
    async def test_unknown_status_streams_deployer_log(self, service, cluster, no_wait):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", DeploymentStatus.UNKNOWN)
        cluster.logs["myapp-1-deploy"] = [b"--> Deploying\n"]

        stream = await service.get("test", "myapp", {"no_wait": no_wait})

        assert await stream.read() == b"--> Deploying\n"
        assert cluster.opened[0][0] == "myapp-1-deploy"

    async def test_complete_streams_application_pod(self, service, cluster):
        cluster.add_config("myapp", 3)
        cluster.set_deployment("myapp-3", COMPLETE)
        cluster.add_app_pod("myapp-3", "myapp-3-abcde", "Pending", T0)
        cluster.add_app_pod("myapp-3", "myapp-3-fghij", "Running", T0)
        cluster.logs["myapp-3-fghij"] = [b"serving on :8080\n"]

        stream = await service.get("test", "myapp")

        assert await stream.read() == b"serving on :8080\n"
        assert cluster.opened[0][0] == "myapp-3-fghij"

    async def test_complete_prefers_running_newest_pod(self, service, cluster):
        """Latest myapp-3 is Complete; the running pod is chosen over an older succeeded one."""
        cluster.add_config("myapp", 3)
        cluster.set_deployment("myapp-3", COMPLETE)
        cluster.add_app_pod("myapp-3", "myapp-3-xyz", "Succeeded", T0)
        cluster.add_app_pod("myapp-3", "myapp-3-abcde", "Running", T0 + timedelta(minutes=5))

        stream = await service.get(
            "test", "myapp", {"version": None, "previous": False, "nowait": False}
        )

        assert cluster.opened[0][0] == "myapp-3-abcde"
        assert stream.flush is False

    async def test_complete_without_pods(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", COMPLETE)

        with pytest.raises(NoCandidateProcess):
            await service.get("test", "myapp")

    async def test_previous_version(self, service, cluster):
        cluster.add_config("myapp", 3)
        cluster.set_deployment("myapp-2", FAILED)

        await service.get("test", "myapp", {"previous": True})

        assert cluster.opened[0][0] == "myapp-2-deploy"

    @pytest.mark.parametrize("status", [NEW, PENDING])
    async def test_no_wait_returns_empty_stream(self, service, cluster, status):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", status)

        stream = await service.get("test", "myapp", {"nowait": True})

        assert stream.is_empty
        assert await stream.read() == b""
        assert cluster.opened == []
        assert "pod/myapp-1-deploy" not in cluster.reads

    async def test_waits_then_streams_deployer(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", NEW, PENDING, RUNNING)
        cluster.set_pod("myapp-1-deploy", None, "Pending", "Running")
        cluster.logs["myapp-1-deploy"] = [b"--> Deploying\n"]

        stream = await service.get("test", "myapp")

        assert await stream.read() == b"--> Deploying\n"
        assert cluster.opened[0][0] == "myapp-1-deploy"

    async def test_waits_then_selects_application_pod(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", PENDING, COMPLETE)
        cluster.set_pod("myapp-1-deploy", "Succeeded")
        cluster.add_app_pod("myapp-1", "myapp-1-xyz", "Running", T0)

        await service.get("test", "myapp")

        assert cluster.opened[0][0] == "myapp-1-xyz"

    async def test_deployer_never_runs(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", PENDING)
        cluster.set_pod("myapp-1-deploy", "Pending")

        with pytest.raises(DeployerStartFailed) as exc_info:
            await service.get("test", "myapp")

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert "myapp-1-deploy" in str(exc_info.value)
        assert cluster.opened == []

    async def test_deployment_never_progresses(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", PENDING)
        cluster.set_pod("myapp-1-deploy", "Running")

        with pytest.raises(ProgressTimeout) as exc_info:
            await service.get("test", "myapp")

        assert exc_info.value.status_code == 504
        assert exc_info.value.retry_after_seconds == 2

    async def test_deployment_deleted_while_waiting(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", PENDING, PENDING, None)
        cluster.set_pod("myapp-1-deploy", "Running")

        with pytest.raises(DeploymentProgressFailed, match="test/myapp-1"):
            await service.get("test", "myapp")

    async def test_forwards_pod_log_options(self, service, cluster):
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", RUNNING)

        stream = await service.get(
            "test", "myapp", {"follow": True, "tail_lines": 5, "container": "web"}
        )

        _, options = cluster.opened[0]
        assert stream.flush is True
        assert options.follow is True
        assert options.tail_lines == 5
        assert options.container == "web"


class TestResolveTarget:
    async def test_running(self, service, cluster):
        deployment = cluster.make_deployment("myapp-1", RUNNING)

        target = await service.resolve_target(deployment, no_wait=False)

        assert target.kind == TargetKind.DEPLOYER
        assert target.pod_name == "myapp-1-deploy"

    async def test_new_without_waiting(self, service, cluster):
        deployment = cluster.make_deployment("myapp-1", NEW)

        target = await service.resolve_target(deployment, no_wait=True)

        assert target.kind == TargetKind.EMPTY
        assert target.pod_name is None


class TestCancellation:
    async def test_cancel_during_deployment_wait(self, service, cluster):
        cluster.add_config("myapp", 1)
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.02, cancel.set)

        with pytest.raises(RequestCancelled):
            await service.get("test", "myapp", cancel=cancel)

    async def test_cancel_during_progress_wait(self, cluster, fast_settings):
        service = DeploymentLogService(
            cluster,
            cluster,
            cluster,
            fast_settings.model_copy(update={"timeout_seconds": 10.0}),
        )
        cluster.add_config("myapp", 1)
        cluster.set_deployment("myapp-1", PENDING)
        cluster.set_pod("myapp-1-deploy", "Pending")
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)

        with pytest.raises(RequestCancelled) as exc_info:
            await service.get("test", "myapp", cancel=cancel)

        assert exc_info.value.status_code == 499
