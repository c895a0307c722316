"""
Health checks - Probe the CUPS endpoint and classify the outcome.

A check is a single GET without retries. Transport failures and HTTP error
statuses are turned into an unhealthy result instead of being raised.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)

SEVERITY_CRITICAL = "critical"
SEVERITY_ERROR = "error"

MESSAGE_DOWN = "CUPS service is down"
MESSAGE_NOT_ACCEPTING = "CUPS queue not accepting jobs"

CHUNK_SIZE = 8192


@dataclass(frozen=True)
class HealthResult:
    """Outcome of one health check."""

    healthy: bool
    severity: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "HealthResult":
        return cls(healthy=True)

    @classmethod
    def failed(cls, severity: str, message: str) -> "HealthResult":
        return cls(healthy=False, severity=severity, message=message)


def check_status(status_code: int) -> bool:
    """
    Check if the HTTP status code counts as healthy.

    Args:
        status_code: HTTP status code

    Returns:
        True if status code is below 400
    """
    return status_code < 400


def drain_body(
    response: requests.Response,
    deadline: float,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """
    Read and discard a streamed response body.

    Args:
        response: Response opened with ``stream=True``
        deadline: Clock reading after which reading stops
        clock: Monotonic clock

    Returns:
        True if the body was fully read before the deadline
    """
    for _ in response.iter_content(chunk_size=CHUNK_SIZE):
        if clock() > deadline:
            return False
    return True


def check_cups(
    url: str,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
    clock: Callable[[], float] = time.monotonic,
) -> HealthResult:
    """
    Probe the CUPS endpoint once.

    The response body is always read and the response closed so the
    connection can be reused by the session. ``timeout`` bounds the whole
    check: requests applies it to the connect and to each read, and the
    body drain stops once it has elapsed since the request started.

    Args:
        url: URL to probe
        timeout: Check timeout in seconds
        session: Session to issue the request with (optional)
        clock: Monotonic clock

    Returns:
        HealthResult
    """
    http = session if session is not None else requests
    deadline = clock() + timeout

    try:
        response = http.get(url, timeout=timeout, stream=True)
    except requests.exceptions.RequestException as e:
        logger.debug("Request to %s failed: %s", url, e)
        return HealthResult.failed(SEVERITY_CRITICAL, MESSAGE_DOWN)

    try:
        completed = drain_body(response, deadline, clock)
    except requests.exceptions.RequestException as e:
        logger.debug("Reading response from %s failed: %s", url, e)
        completed = True
    finally:
        response.close()

    if not completed:
        logger.debug("Reading response from %s exceeded %ss", url, timeout)
        return HealthResult.failed(SEVERITY_CRITICAL, MESSAGE_DOWN)

    logger.debug("GET %s -> %d", url, response.status_code)
    if not check_status(response.status_code):
        return HealthResult.failed(SEVERITY_ERROR, MESSAGE_NOT_ACCEPTING)
    return HealthResult.ok()
