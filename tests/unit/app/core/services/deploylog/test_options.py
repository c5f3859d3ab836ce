"""Unit tests for DeploymentLogOptions."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.app.core.services.deploylog.models import DeploymentLogOptions


class TestDeploymentLogOptions:
    def test_defaults(self):
        opts = DeploymentLogOptions()

        assert opts.version is None
        assert opts.previous is False
        assert opts.no_wait is False
        assert opts.follow is False

    def test_accepts_nowait_alias_and_field_name(self):
        assert DeploymentLogOptions.model_validate({"nowait": True}).no_wait is True
        assert DeploymentLogOptions(no_wait=True).no_wait is True

    def test_accepts_camel_case_names(self):
        opts = DeploymentLogOptions.model_validate(
            {"noWait": True, "tailLines": 5, "sinceSeconds": 30, "limitBytes": 10}
        )

        assert opts.no_wait is True
        assert opts.tail_lines == 5
        assert opts.since_seconds == 30
        assert opts.limit_bytes == 10

    @pytest.mark.parametrize("key", ["bogus", "tail"])
    def test_rejects_unknown_keys(self, key):
        with pytest.raises(ValidationError):
            DeploymentLogOptions.model_validate({key: 1})

    def test_version_is_not_range_checked(self):
        """Version validity depends on the config and is checked later."""
        assert DeploymentLogOptions(version=0).version == 0

    @pytest.mark.parametrize(
        "field, value",
        [("tail_lines", -1), ("since_seconds", 0), ("limit_bytes", 0)],
    )
    def test_rejects_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            DeploymentLogOptions(**{field: value})

    def test_rejects_since_seconds_with_since_time(self):
        with pytest.raises(ValidationError, match="sinceTime or sinceSeconds"):
            DeploymentLogOptions(
                since_seconds=10, since_time=datetime(2024, 1, 1, tzinfo=UTC)
            )

    def test_is_immutable(self):
        opts = DeploymentLogOptions()

        with pytest.raises(ValidationError):
            opts.follow = True  # type: ignore[misc]

    def test_to_pod_log_options(self):
        """Pod log options carry everything except the routing fields."""
        since = datetime(2024, 1, 1, tzinfo=UTC)
        opts = DeploymentLogOptions(
            version=2,
            previous=True,
            no_wait=True,
            follow=True,
            container="web",
            tail_lines=10,
            since_time=since,
            timestamps=True,
            limit_bytes=2048,
            previous_container=True,
        )

        pod_opts = opts.to_pod_log_options()

        assert pod_opts.container == "web"
        assert pod_opts.follow is True
        assert pod_opts.previous is True
        assert pod_opts.since_time == since
        assert pod_opts.since_seconds is None
        assert pod_opts.timestamps is True
        assert pod_opts.tail_lines == 10
        assert pod_opts.limit_bytes == 2048
