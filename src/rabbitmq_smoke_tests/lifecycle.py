"""Service lifecycle orchestration.

One ServiceLifecycle drives a single scenario through:

1. push the sample app without starting it
2. create a service instance of the scenario's plan
3. bind the instance, set RABBITMQ_SKIP_SSL, start the app and wait for /ping
4. exercise the broker through the app's HTTP façade
5. clean up whatever the earlier steps created

Each step records its success in LifecycleState. A step refuses to run unless
the steps it depends on succeeded, and cleanup only undoes steps that
succeeded.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .app_client import BrokerAppClient
from .cf import CloudFoundryCLI
from .config import SmokeTestConfig
from .errors import CleanupError, PrerequisiteError, SmokeTestError
from .polling import Poller
from .scenarios import Scenario
from .shared import get_logger, random_name

logger = get_logger(__name__)

TEST_QUEUE = "test-q"

PUSH_APP = "push_app"
CREATE_SERVICE = "create_service"
BIND_AND_START = "bind_and_start"
EXERCISE = "exercise"
CLEANUP = "cleanup"

STEPS = (PUSH_APP, CREATE_SERVICE, BIND_AND_START, EXERCISE, CLEANUP)

# State flags each step depends on
REQUIREMENTS: dict[str, tuple[str, ...]] = {
    PUSH_APP: (),
    CREATE_SERVICE: ("app_pushed",),
    BIND_AND_START: ("app_pushed", "service_created"),
    EXERCISE: ("app_pushed", "service_created", "service_bound", "app_running"),
    CLEANUP: (),
}


@dataclass
class LifecycleState:
    """Per-scenario progress flags."""

    app_name: str
    service_instance_name: str | None = None
    app_pushed: bool = False
    service_created: bool = False
    service_bound: bool = False
    app_running: bool = False

    def missing_for(self, step: str) -> list[str]:
        """Flags step depends on that are not yet set."""
        return [flag for flag in REQUIREMENTS[step] if not getattr(self, flag)]


class ServiceLifecycle:
    """Drive one scenario against the platform."""

    def __init__(
        self,
        config: SmokeTestConfig,
        scenario: Scenario,
        cli: CloudFoundryCLI,
        client_factory: Callable[[str], BrokerAppClient] | None = None,
    ):
        """Initialize the lifecycle.

        Args:
            config: Loaded configuration.
            scenario: Plan and protocol to exercise.
            cli: cf CLI wrapper, already targeting the test org and space.
            client_factory: Builds the app client for a base URL.
                Defaults to a BrokerAppClient using the config's scaled timeout.
        """
        self.config = config
        self.scenario = scenario
        self.cli = cli
        self.client_factory = client_factory or self._default_client
        self.state = LifecycleState(app_name=random_name())
        self.log = logger.bind(app=self.state.app_name)

    def _default_client(self, base_url: str) -> BrokerAppClient:
        poller = Poller(
            timeout_seconds=self.config.timeout,
            interval_seconds=self.config.retry_interval_seconds,
        )
        return BrokerAppClient(base_url, poller, verify_ssl=not self.config.skip_ssl_validation)

    @property
    def app_uri(self) -> str:
        return self.config.app_uri(self.state.app_name)

    def require(self, step: str) -> None:
        """Raise PrerequisiteError if step's dependencies have not succeeded."""
        missing = self.state.missing_for(step)
        if missing:
            raise PrerequisiteError(
                message=f"{step} requires {', '.join(missing)}",
                step=step,
                missing=missing,
            )

    def push_app(self) -> None:
        """Push the sample app without starting it."""
        self.require(PUSH_APP)
        app_path = self.scenario.app_path(self.config.assets_path)
        self.log.info("pushing app", path=str(app_path))
        self.cli.run(
            "push",
            self.state.app_name,
            "-m",
            self.config.app_memory,
            "-p",
            str(app_path),
            "-s",
            self.config.app_stack,
            "--no-start",
            timeout=self.config.timeout,
        )
        self.state.app_pushed = True

    def create_service(self) -> None:
        """Create a service instance of the scenario's plan."""
        self.require(CREATE_SERVICE)
        self.state.service_instance_name = random_name()
        self.log.info(
            "creating service instance",
            service=self.config.service_name,
            plan=self.scenario.plan,
            instance=self.state.service_instance_name,
        )
        self.cli.run(
            "create-service",
            self.config.service_name,
            self.scenario.plan,
            self.state.service_instance_name,
            timeout=self.config.timeout,
        )
        self.state.service_created = True

    def bind_and_start(self) -> None:
        """Bind the instance, start the app and wait until it answers /ping."""
        self.require(BIND_AND_START)
        app_name = self.state.app_name
        self.cli.run(
            "bind-service",
            app_name,
            self.state.service_instance_name,
            timeout=self.config.timeout,
        )
        self.state.service_bound = True

        skip_ssl = "1" if self.config.rabbitmq_skip_ssl else "0"
        self.cli.run(
            "set-env", app_name, "RABBITMQ_SKIP_SSL", skip_ssl, timeout=self.config.start_timeout
        )
        self.cli.run("start", app_name, timeout=self.config.start_timeout)

        self.log.info("checking that the app is responding", url=f"{self.app_uri}/ping")
        client = self.client_factory(self.app_uri)
        try:
            client.ping()
        finally:
            client.close()
        self.state.app_running = True

    def exercise(self) -> None:
        """Write to and read from the service instance through the app."""
        self.require(EXERCISE)
        message = self.scenario.protocol.message
        client = self.client_factory(self.app_uri)
        try:
            if self.scenario.protocol.manages_queues:
                self.log.info("creating queue", queue=TEST_QUEUE)
                client.create_queue(TEST_QUEUE)
                client.list_queues(TEST_QUEUE)

            client.read_empty(TEST_QUEUE)
            self.log.info("publishing to queue", queue=TEST_QUEUE, message=message)
            client.publish(TEST_QUEUE, message)
            client.read(TEST_QUEUE, message)
            client.read_empty(TEST_QUEUE)
        finally:
            client.close()

    def cleanup(self) -> None:
        """Unbind, delete the instance and delete the app.

        Each action runs only if the step that created its target succeeded,
        and every action is attempted even if an earlier one fails.

        Raises:
            CleanupError: If any attempted action failed.
        """
        app_name = self.state.app_name
        instance = self.state.service_instance_name
        actions: list[tuple[str, tuple[str, ...]]] = []
        if self.state.service_bound:
            actions.append(("unbind service", ("unbind-service", app_name, instance)))
        if self.state.service_created:
            actions.append(("delete service", ("delete-service", "-f", instance)))
        if self.state.app_pushed:
            actions.append(("delete app", ("delete", app_name, "-f")))

        failures: list[SmokeTestError] = []
        for label, args in actions:
            try:
                self.cli.run(*args, timeout=self.config.timeout)
            except SmokeTestError as e:
                self.log.error("cleanup action failed", action=label, error=str(e))
                failures.append(e)

        if failures:
            raise CleanupError(
                message="Cleanup failed: " + "; ".join(str(f) for f in failures),
                failures=failures,
            )
