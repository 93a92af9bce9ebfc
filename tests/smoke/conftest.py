"""Fixtures for the live smoke suite.

The suite runs against a real Cloud Foundry deployment described by the file
named in CONFIG_PATH:

  CONFIG_PATH unset        -> every smoke test is skipped
  CONFIG_PATH unreadable   -> pytest aborts before any scenario runs
  CONFIG_PATH valid        -> one lifecycle per plan x protocol scenario

Scenarios run one at a time; each gets its own app and service instance.
"""

from __future__ import annotations

import os

import pytest

from rabbitmq_smoke_tests.config import CONFIG_PATH_ENV, SmokeTestConfig, load_config
from rabbitmq_smoke_tests.context import PlatformContext
from rabbitmq_smoke_tests.errors import ConfigError
from rabbitmq_smoke_tests.lifecycle import ServiceLifecycle
from rabbitmq_smoke_tests.scenarios import build_scenarios
from rabbitmq_smoke_tests.shared import configure_logging

SMOKE_CONFIG = pytest.StashKey["SmokeTestConfig | None"]()


def pytest_configure(config: pytest.Config) -> None:
    if not os.environ.get(CONFIG_PATH_ENV):
        config.stash[SMOKE_CONFIG] = None
        return

    try:
        config.stash[SMOKE_CONFIG] = load_config()
    except ConfigError as e:
        raise pytest.UsageError(f"Cannot load smoke test config: {e}") from e

    configure_logging(os.environ.get("SMOKE_LOG_LEVEL", "info"))


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    """Parametrize lifecycle tests over the scenario table."""
    if "scenario" not in metafunc.fixturenames:
        return

    smoke_config = metafunc.config.stash.get(SMOKE_CONFIG, None)
    if smoke_config is None:
        metafunc.parametrize(
            "scenario",
            [pytest.param(None, marks=pytest.mark.skip(reason=f"{CONFIG_PATH_ENV} not set"))],
            scope="class",
        )
        return

    scenarios = build_scenarios(smoke_config)
    metafunc.parametrize("scenario", scenarios, ids=[s.id for s in scenarios], scope="class")


@pytest.fixture(scope="session")
def smoke_config(pytestconfig: pytest.Config) -> SmokeTestConfig:
    """Loaded smoke test configuration."""
    return pytestconfig.stash[SMOKE_CONFIG]


@pytest.fixture(scope="session")
def cf(smoke_config):
    """cf CLI logged in and targeting a throwaway org and space."""
    context = PlatformContext(smoke_config)
    try:
        yield context.setup()
    finally:
        context.teardown()


@pytest.fixture(scope="class")
def lifecycle(smoke_config, scenario, cf) -> ServiceLifecycle:
    """One lifecycle shared by the ordered steps of a scenario."""
    return ServiceLifecycle(smoke_config, scenario, cf)
