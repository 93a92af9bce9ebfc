"""Error taxonomy for the smoke tests.

Every failure a scenario can hit is one of:
- a platform command that exited non-zero or ran past its timeout
- an HTTP expectation that was never met within the scaled polling window
- a configuration file that could not be loaded (aborts the whole run)
"""

from dataclasses import dataclass, field


@dataclass
class SmokeTestError(Exception):
    """Base error class for smoke test failures."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(SmokeTestError):
    """Config file missing, unreadable or malformed."""

    path: str | None = None


@dataclass
class CommandFailedError(SmokeTestError):
    """Platform CLI command exited with a non-zero status."""

    command: list[str] = field(default_factory=list)
    returncode: int = 1
    stdout: str = ""
    stderr: str = ""


@dataclass
class CommandTimeoutError(SmokeTestError):
    """Platform CLI command did not exit within its timeout."""

    command: list[str] = field(default_factory=list)
    timeout: float = 0.0


@dataclass
class AssertionTimeoutError(SmokeTestError):
    """Expected response never observed within the polling window."""

    url: str = ""
    attempts: int = 0
    last_body: str | None = None
    last_error: str | None = None


@dataclass
class PrerequisiteError(SmokeTestError):
    """A lifecycle step was invoked before the steps it depends on succeeded."""

    step: str = ""
    missing: list[str] = field(default_factory=list)


@dataclass
class CleanupError(SmokeTestError):
    """One or more cleanup steps failed."""

    failures: list[SmokeTestError] = field(default_factory=list)


def command_failed(
    command: list[str], returncode: int, stdout: str, stderr: str
) -> CommandFailedError:
    """Build a CommandFailedError with a readable message.

    Args:
        command: Redacted argv of the command
        returncode: Exit status
        stdout: Captured standard output
        stderr: Captured standard error

    Returns:
        CommandFailedError
    """
    detail = stderr.strip() or stdout.strip()
    message = f"'{' '.join(command)}' exited with status {returncode}"
    if detail:
        message = f"{message}: {detail.splitlines()[-1]}"
    return CommandFailedError(
        message=message,
        command=command,
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )
