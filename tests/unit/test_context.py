"""Unit tests for the platform context."""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from rabbitmq_smoke_tests.cf import REDACTED
from rabbitmq_smoke_tests.context import PlatformContext
from rabbitmq_smoke_tests.errors import CommandFailedError


def argv_list(mock_run) -> list[list[str]]:
    return [c[0][0] for c in mock_run.call_args_list]


class TestPlatformContext:
    """Tests for PlatformContext."""

    def test_setup_logs_in_and_targets_new_space(self, smoke_config):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            context = PlatformContext(smoke_config)
            cli = context.setup()

            try:
                commands = argv_list(mock_run)
                assert commands[0] == [
                    "cf",
                    "api",
                    "https://api.sys.example.com",
                    "--skip-ssl-validation",
                ]
                assert commands[1] == ["cf", "auth", "admin", "s3cret"]
                assert commands[2] == ["cf", "create-org", context.org_name]
                assert commands[3] == [
                    "cf",
                    "create-space",
                    "-o",
                    context.org_name,
                    context.space_name,
                ]
                assert commands[4] == [
                    "cf",
                    "target",
                    "-o",
                    context.org_name,
                    "-s",
                    context.space_name,
                ]
                assert context.org_name.startswith("rabbitmq-smoke-test-org-")
                assert cli.cf_home == context.cf_home
                assert context.cf_home.is_dir()
                env = mock_run.call_args.kwargs["env"]
                assert env["CF_HOME"] == str(context.cf_home)
                assert cli.redact(["s3cret"]) == [REDACTED]
            finally:
                context.teardown()

    def test_teardown_deletes_org_and_cf_home(self, smoke_config):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            context = PlatformContext(smoke_config)
            context.setup()
            cf_home = context.cf_home
            org = context.org_name

            context.teardown()

            assert argv_list(mock_run)[-1] == ["cf", "delete-org", "-f", org]
            assert not cf_home.exists()
            assert context.cf_home is None

    def test_no_api_ssl_skip(self, smoke_config):
        config = replace(smoke_config, skip_ssl_validation=False)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            context = PlatformContext(config)
            context.setup()
            context.teardown()

        assert argv_list(mock_run)[0] == ["cf", "api", "https://api.sys.example.com"]

    def test_failed_org_creation_skips_org_delete(self, smoke_config):
        """teardown only deletes an org that was created."""

        def run(argv, **kwargs):
            returncode = 1 if argv[1] == "create-org" else 0
            return MagicMock(returncode=returncode, stdout="", stderr="not authorized")

        with patch("subprocess.run", side_effect=run) as mock_run:
            context = PlatformContext(smoke_config)
            with pytest.raises(CommandFailedError):
                context.setup()
            context.teardown()

        assert ["delete-org"] not in [a[1:2] for a in argv_list(mock_run)]
        assert context.cf_home is None

    def test_existing_target_without_admin_user(self, smoke_config):
        """Without an admin user the caller's cf login is reused."""
        config = replace(smoke_config, admin_user="", admin_password="")
        with patch("subprocess.run") as mock_run:
            with PlatformContext(config) as cli:
                assert cli.cf_home is None

        mock_run.assert_not_called()
