"""HTTP client for the sample broker applications.

The sample apps expose the broker through a small HTTP façade:

    GET  /ping           -> "OK"
    POST /queues         name=<queue>  -> "SUCCESS"
    GET  /queues         -> one queue name per line
    PUT  /queue/<queue>  data=<msg>    -> "SUCCESS"
    GET  /queue/<queue>  -> next message, or empty body
"""

from __future__ import annotations

import requests

from .polling import Poller, PollResult, contains, equals, has_line, is_empty
from .shared import get_logger

logger = get_logger(__name__)

SUCCESS_MARKER = "SUCCESS"
PING_MARKER = "OK"


class BrokerAppClient:
    """Drive a deployed sample app, asserting each response eventually matches."""

    def __init__(
        self,
        base_url: str,
        poller: Poller,
        verify_ssl: bool = True,
        request_timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: App URI, e.g. https://<app>.<apps_domain>
            poller: Poller carrying the scaled timeout and retry interval
            verify_ssl: Verify TLS certificates of the app route
            request_timeout: Per-request timeout in seconds
            session: Optional requests session to reuse
        """
        self.base_url = base_url.rstrip("/")
        self.poller = poller
        self.verify_ssl = verify_ssl
        self.request_timeout = request_timeout
        self.session = session or requests.Session()

    def _request(
        self, method: str, path: str, data: dict[str, str] | None = None
    ) -> requests.Response:
        return self.session.request(
            method,
            f"{self.base_url}{path}",
            data=data,
            verify=self.verify_ssl,
            timeout=self.request_timeout,
        )

    def _expect(
        self,
        method: str,
        path: str,
        predicate,
        description: str,
        data: dict[str, str] | None = None,
    ) -> PollResult:
        url = f"{self.base_url}{path}"
        logger.info("checking app response", method=method, url=url, expected=description)
        return self.poller.until(
            lambda: self._request(method, path, data),
            predicate,
            description,
            url=url,
        )

    def ping(self) -> PollResult:
        """Wait until the app answers /ping with OK."""
        return self._expect(
            "GET", "/ping", contains(PING_MARKER), f"body containing {PING_MARKER!r}"
        )

    def create_queue(self, name: str) -> PollResult:
        """Create a queue."""
        return self._expect(
            "POST",
            "/queues",
            contains(SUCCESS_MARKER),
            f"body containing {SUCCESS_MARKER!r}",
            data={"name": name},
        )

    def list_queues(self, expected: str) -> PollResult:
        """Wait until the queue listing includes expected."""
        return self._expect("GET", "/queues", has_line(expected), f"queue {expected!r} listed")

    def publish(self, queue: str, message: str) -> PollResult:
        """Publish a message to a queue."""
        return self._expect(
            "PUT",
            f"/queue/{queue}",
            contains(SUCCESS_MARKER),
            f"body containing {SUCCESS_MARKER!r}",
            data={"data": message},
        )

    def read(self, queue: str, expected: str) -> PollResult:
        """Wait until reading the queue returns expected."""
        return self._expect("GET", f"/queue/{queue}", equals(expected), f"message {expected!r}")

    def read_empty(self, queue: str) -> PollResult:
        """Wait until reading the queue returns an empty body."""
        return self._expect("GET", f"/queue/{queue}", is_empty(), "empty body")

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
