"""Scenario table: every configured plan crossed with every enabled protocol."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .config import SmokeTestConfig


class Protocol(Enum):
    """Broker protocol front-end exercised by a sample app."""

    AMQP = "amqp"
    STOMP = "stomp"
    MQTT = "mqtt"

    @property
    def app_dir(self) -> str:
        """Directory of the sample app under the assets path."""
        if self is Protocol.AMQP:
            return "cf-rabbitmq-example-app"
        return f"cf-rabbitmq-example-{self.value}-app"

    @property
    def message(self) -> str:
        """Message published and read back by the scenario."""
        return f"test-message-{self.value}"

    @property
    def manages_queues(self) -> bool:
        """Whether the sample app exposes POST/GET /queues."""
        return self is Protocol.AMQP


@dataclass(frozen=True)
class Scenario:
    """One plan x protocol lifecycle run."""

    plan: str
    protocol: Protocol

    @property
    def id(self) -> str:
        return f"{self.plan}-{self.protocol.value}"

    def app_path(self, assets_path: Path) -> Path:
        return assets_path / self.protocol.app_dir

    def __str__(self) -> str:
        return self.id


def enabled_protocols(config: SmokeTestConfig) -> list[Protocol]:
    """AMQP always, then STOMP and MQTT when toggled on."""
    protocols = [Protocol.AMQP]
    if config.test_stomp:
        protocols.append(Protocol.STOMP)
    if config.test_mqtt:
        protocols.append(Protocol.MQTT)
    return protocols


def build_scenarios(
    config: SmokeTestConfig,
    plans: Iterable[str] | None = None,
    protocols: Iterable[Protocol] | None = None,
) -> list[Scenario]:
    """Build the ordered scenario table.

    Args:
        config: Loaded configuration
        plans: Optional subset of plan names to keep
        protocols: Optional subset of protocols to keep

    Returns:
        Scenarios in plan order, protocols in AMQP, STOMP, MQTT order
    """
    plan_filter = set(plans) if plans else None
    protocol_filter = set(protocols) if protocols else None

    scenarios = []
    for plan in config.plan_names:
        if plan_filter is not None and plan not in plan_filter:
            continue
        for protocol in enabled_protocols(config):
            if protocol_filter is not None and protocol not in protocol_filter:
                continue
            scenarios.append(Scenario(plan, protocol))
    return scenarios
