"""Retry-until-timeout polling of HTTP endpoints.

A poll repeats a request every `interval_seconds` until the response body
satisfies a predicate or `timeout_seconds` have elapsed. Connection errors
and non-2xx responses count as unsuccessful attempts.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import requests

from .errors import AssertionTimeoutError
from .shared import get_logger

logger = get_logger(__name__)


@dataclass
class PollResult:
    """Result of a polling run."""

    matched: bool
    attempts: int = 0
    elapsed_seconds: float = 0.0
    body: str | None = None
    status_code: int | None = None
    error: str | None = None


class Poller:
    """Poll a request until its body matches."""

    def __init__(self, timeout_seconds: float = 25.0, interval_seconds: float = 4.0):
        """Initialize poller.

        Args:
            timeout_seconds: Total time allowed before giving up.
            interval_seconds: Seconds between attempts.
        """
        self.timeout_seconds = timeout_seconds
        self.interval_seconds = interval_seconds

    def poll(
        self,
        fetch: Callable[[], requests.Response],
        predicate: Callable[[str], bool],
    ) -> PollResult:
        """Repeat fetch until predicate(body) holds or the timeout expires.

        At least one attempt is always made.

        Args:
            fetch: Issues the request and returns the response.
            predicate: Tested against the response body.

        Returns:
            PollResult with the last observed body and status.
        """
        start = time.monotonic()
        attempts = 0
        body: str | None = None
        status_code: int | None = None
        last_error: str | None = None

        while True:
            attempts += 1
            try:
                response = fetch()
                body = response.text
                status_code = response.status_code
                if not response.ok:
                    last_error = f"HTTP {response.status_code}"
                elif predicate(body):
                    return PollResult(
                        matched=True,
                        attempts=attempts,
                        elapsed_seconds=time.monotonic() - start,
                        body=body,
                        status_code=status_code,
                    )
                else:
                    last_error = None
            except requests.ConnectionError:
                last_error = "Connection refused"
            except requests.Timeout:
                last_error = "Request timeout"
            except requests.RequestException as e:
                last_error = str(e)

            elapsed = time.monotonic() - start
            if elapsed + self.interval_seconds > self.timeout_seconds:
                return PollResult(
                    matched=False,
                    attempts=attempts,
                    elapsed_seconds=elapsed,
                    body=body,
                    status_code=status_code,
                    error=last_error,
                )

            logger.debug("poll attempt unsuccessful", attempt=attempts, error=last_error)
            time.sleep(self.interval_seconds)

    def until(
        self,
        fetch: Callable[[], requests.Response],
        predicate: Callable[[str], bool],
        description: str,
        url: str = "",
    ) -> PollResult:
        """Poll and raise if the expectation is never met.

        Args:
            fetch: Issues the request and returns the response.
            predicate: Tested against the response body.
            description: Human-readable expectation, used in the error message.
            url: URL being polled, for the error.

        Returns:
            PollResult of the matching attempt.

        Raises:
            AssertionTimeoutError: If the predicate never held.
        """
        result = self.poll(fetch, predicate)
        if result.matched:
            logger.info("expectation met", url=url, expected=description, attempts=result.attempts)
            return result

        message = (
            f"{url}: expected {description} within {self.timeout_seconds:g}s "
            f"({result.attempts} attempts)"
        )
        if result.error:
            message = f"{message}. Last error: {result.error}"
        elif result.body is not None:
            message = f"{message}. Last body: {result.body!r}"
        raise AssertionTimeoutError(
            message=message,
            url=url,
            attempts=result.attempts,
            last_body=result.body,
            last_error=result.error,
        )


def contains(text: str) -> Callable[[str], bool]:
    """Predicate: body contains text."""
    return lambda body: text in body


def has_line(line: str) -> Callable[[str], bool]:
    """Predicate: one of the body's lines equals line."""
    return lambda body: line in body.splitlines()


def equals(text: str) -> Callable[[str], bool]:
    """Predicate: body equals text, ignoring surrounding whitespace."""
    return lambda body: body.strip() == text


def is_empty() -> Callable[[str], bool]:
    """Predicate: body is blank."""
    return lambda body: body.strip() == ""
