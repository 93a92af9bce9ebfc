"""Cloud Foundry CLI wrapper.

Runs `cf` as a subprocess and turns a non-zero exit or an expired timeout
into an error. Output is captured and logged at debug level.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .errors import CommandTimeoutError, command_failed
from .shared import get_logger

logger = get_logger(__name__)

REDACTED = "[REDACTED]"


@dataclass
class CommandResult:
    """Result of a completed cf invocation."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str


class CloudFoundryCLI:
    """Invoke the cf CLI."""

    def __init__(
        self,
        executable: str = "cf",
        cf_home: Path | None = None,
        secrets: tuple[str, ...] = (),
    ):
        """Initialize the CLI wrapper.

        Args:
            executable: cf binary name or path.
            cf_home: Directory used as CF_HOME so runs do not share login state.
            secrets: Argument values replaced with a placeholder when logging.
        """
        self.executable = executable
        self.cf_home = cf_home
        self.secrets = secrets

    def redact(self, args: list[str]) -> list[str]:
        """Return args with secret values replaced."""
        return [REDACTED if arg in self.secrets else arg for arg in args]

    def _env(self) -> dict[str, str] | None:
        if self.cf_home is None:
            return None
        env = dict(os.environ)
        env["CF_HOME"] = str(self.cf_home)
        return env

    def run(self, *args: str, timeout: float) -> CommandResult:
        """Run a cf command and require exit status 0.

        Args:
            *args: cf subcommand and its arguments
            timeout: Seconds to wait for the command to exit

        Returns:
            CommandResult of the successful command

        Raises:
            CommandFailedError: If the command exits non-zero, cf is not installed
                or cannot be started
            CommandTimeoutError: If the command does not exit within timeout
        """
        argv = [self.executable, *args]
        shown = self.redact(argv)
        logger.info("cf command", command=" ".join(shown), timeout=timeout)

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                env=self._env(),
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(
                message=f"'{' '.join(shown)}' did not exit within {timeout:g}s",
                command=shown,
                timeout=timeout,
            ) from e
        except FileNotFoundError as e:
            raise command_failed(shown, 127, "", f"{self.executable} not found: {e}") from e
        except OSError as e:
            raise command_failed(shown, 127, "", f"could not run {self.executable}: {e}") from e

        logger.debug(
            "cf command finished",
            command=" ".join(shown),
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

        if result.returncode != 0:
            raise command_failed(shown, result.returncode, result.stdout, result.stderr)

        return CommandResult(
            command=shown,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
