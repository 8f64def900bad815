"""
HTTP transport for the Bitso API.

Sends a single blocking request and hands back the response body as text,
whatever the status code. Interpreting the body is the envelope parser's job.
"""

import logging
import threading
import time
from typing import Dict, Optional

import requests

from .errors import InputContractError, TransportError


logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ('GET', 'POST', 'DELETE')


class RequestThrottle:
    """Enforces a minimum interval between consecutive requests."""

    def __init__(self, min_interval: float = 0.0):
        if min_interval < 0:
            raise ValueError("min_interval must not be negative")
        self.min_interval = min_interval
        self.last_request_time = 0.0
        self._lock = threading.Lock()

    def wait_if_needed(self) -> None:
        """Sleep until min_interval has passed since the previous request."""
        if self.min_interval <= 0:
            return

        with self._lock:
            time_since_last = time.monotonic() - self.last_request_time
            if time_since_last < self.min_interval:
                sleep_time = self.min_interval - time_since_last
                logger.debug(f"Throttling request for {sleep_time:.3f}s")
                time.sleep(sleep_time)
            self.last_request_time = time.monotonic()


class HttpTransport:
    """
    Thin wrapper around requests.Session.

    No retries: a failed request raises TransportError and the caller decides
    what to do next.
    """

    def __init__(self, timeout: float = 30.0, min_request_interval: float = 0.0,
                 session: Optional[requests.Session] = None):
        """
        Initialize the transport.

        Args:
            timeout: Default request timeout in seconds
            min_request_interval: Minimum seconds between requests (0 disables throttling)
            session: Optional pre-configured session
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.throttle = RequestThrottle(min_request_interval)

    def request(self, method: str, url: str, headers: Optional[Dict[str, str]] = None,
                body: Optional[str] = None, timeout: Optional[float] = None) -> str:
        """
        Send a request and return the raw response body.

        Args:
            method: GET, POST or DELETE
            url: Absolute URL including the query string
            headers: Request headers
            body: Request body, already serialized
            timeout: Per-call timeout in seconds, overrides the default

        Returns:
            str: Response body text
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise InputContractError(f"Unsupported HTTP method: {method}")

        self.throttle.wait_if_needed()

        try:
            response = self.session.request(
                method,
                url,
                data=body.encode('utf-8') if body is not None else None,
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"Request failed: {e}", method=method, url=url) from e

        if response.status_code >= 400:
            logger.warning(f"{method} {url} returned HTTP {response.status_code}")
        return response.text

    def close(self) -> None:
        self.session.close()
