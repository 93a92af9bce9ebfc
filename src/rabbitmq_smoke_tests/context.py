"""Platform test context.

Logs in to the platform with an isolated CF_HOME and creates a throwaway org
and space for the run. Teardown deletes the org, which takes every app and
service instance left in it along.

When no admin user is configured the context reuses the caller's existing cf
login and target and creates nothing.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

from .cf import CloudFoundryCLI
from .config import SmokeTestConfig
from .shared import get_logger, random_name

logger = get_logger(__name__)


class PlatformContext:
    """Org, space and login state for one smoke test run."""

    def __init__(self, config: SmokeTestConfig, executable: str = "cf"):
        self.config = config
        self.executable = executable
        self.cf_home: Path | None = None
        self.org_name: str | None = None
        self.space_name: str | None = None
        self.org_created = False
        self.cli = CloudFoundryCLI(executable)

    @property
    def manages_login(self) -> bool:
        return bool(self.config.admin_user)

    def setup(self) -> CloudFoundryCLI:
        """Log in and target a fresh org and space.

        Returns:
            CLI wrapper bound to this context's CF_HOME.
        """
        if not self.manages_login:
            logger.info("no admin user configured, using existing cf target")
            return self.cli

        config = self.config
        self.cf_home = Path(tempfile.mkdtemp(prefix=f"{config.name_prefix}-cf-home-"))
        secrets = (config.admin_password,) if config.admin_password else ()
        self.cli = CloudFoundryCLI(self.executable, cf_home=self.cf_home, secrets=secrets)

        timeout = config.timeout
        api_args = ["api", config.api]
        if config.skip_ssl_validation:
            api_args.append("--skip-ssl-validation")
        self.cli.run(*api_args, timeout=timeout)
        self.cli.run("auth", config.admin_user, config.admin_password, timeout=timeout)

        self.org_name = random_name(f"{config.name_prefix}-org")
        self.space_name = random_name(f"{config.name_prefix}-space")
        logger.info("creating test org", org=self.org_name, space=self.space_name)
        self.cli.run("create-org", self.org_name, timeout=timeout)
        self.org_created = True
        self.cli.run("create-space", "-o", self.org_name, self.space_name, timeout=timeout)
        self.cli.run("target", "-o", self.org_name, "-s", self.space_name, timeout=timeout)
        return self.cli

    def teardown(self) -> None:
        """Delete the test org and the isolated CF_HOME."""
        try:
            if self.org_created:
                logger.info("deleting test org", org=self.org_name)
                self.cli.run("delete-org", "-f", self.org_name, timeout=self.config.start_timeout)
                self.org_created = False
        finally:
            if self.cf_home is not None:
                shutil.rmtree(self.cf_home, ignore_errors=True)
                self.cf_home = None

    def __enter__(self) -> CloudFoundryCLI:
        return self.setup()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()
