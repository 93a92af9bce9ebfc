"""Shared test fixtures for rabbitmq-smoke-tests.

This module provides fixtures for unit-testing the orchestration without a
platform:
- config_data / smoke_config: a representative configuration
- fake_cli: a CloudFoundryCLI stand-in that records every cf invocation
- fake_client: a BrokerAppClient stand-in whose expectations all succeed
"""

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from rabbitmq_smoke_tests.app_client import BrokerAppClient
from rabbitmq_smoke_tests.cf import CloudFoundryCLI
from rabbitmq_smoke_tests.config import SmokeTestConfig, config_from_dict


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Decoded config file contents."""
    return {
        "api": "https://api.sys.example.com",
        "apps_domain": "apps.example.com",
        "admin_user": "admin",
        "admin_password": "s3cret",
        "skip_ssl_validation": True,
        "service_name": "p-rabbitmq",
        "plan_names": ["standard"],
        "rabbitmq_skip_ssl": False,
        "test_stomp": False,
        "test_mqtt": False,
        "timeout_scale": 2,
        "assets_path": "/opt/assets",
    }


@pytest.fixture
def smoke_config(config_data) -> SmokeTestConfig:
    """Loaded configuration."""
    return config_from_dict(config_data)


@pytest.fixture
def config_file(tmp_path, config_data) -> Path:
    """Config data written to a JSON file."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data))
    return path


@pytest.fixture
def fake_cli() -> MagicMock:
    """cf CLI stand-in; every command succeeds unless configured otherwise."""
    return MagicMock(spec=CloudFoundryCLI)


@pytest.fixture
def fake_client() -> MagicMock:
    """Sample app client stand-in; every expectation is met."""
    return MagicMock(spec=BrokerAppClient)
