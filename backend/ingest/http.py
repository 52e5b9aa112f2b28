"""
HTTP client shared by source adapters.

Wraps a requests Session so every outbound call carries a User-Agent and a
timeout, and every failure surfaces as a FetchError subclass.
"""

from typing import Any, Dict, Optional
import logging

import requests

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Network-level failure talking to a source."""


class FetchTimeout(FetchError):
    """Request exceeded its timeout."""


class MalformedPayload(FetchError):
    """Response body is not the JSON shape the adapter expects."""


class HttpClient:
    """JSON-over-HTTP helper with per-request timeouts."""

    def __init__(
        self,
        user_agent: str = "arbitrage-engine/1.0",
        timeout: float = 8.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize HTTP client.

        Args:
            user_agent: User-Agent header sent with every request
            timeout: Default timeout in seconds
            session: Optional pre-configured requests Session
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None
    ) -> Any:
        return self._request("GET", url, params=params, headers=headers, timeout=timeout)

    def post_json(
        self,
        url: str,
        payload: Any,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None
    ) -> Any:
        return self._request("POST", url, json=payload, headers=headers, timeout=timeout)

    def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        **kwargs
    ) -> Any:
        """
        Perform a request and parse the JSON body.

        Raises:
            FetchTimeout: If the request times out
            FetchError: On connection errors or non-2xx responses
            MalformedPayload: If the body is not valid JSON
        """
        timeout = timeout or self.timeout
        merged_headers = {'User-Agent': self.user_agent}
        merged_headers.update(headers or {})

        try:
            response = self.session.request(
                method,
                url,
                headers=merged_headers,
                timeout=timeout,
                **kwargs
            )
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise FetchTimeout(f"Timeout after {timeout}s: {method} {url}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request error: {method} {url}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayload(f"Invalid JSON from {url}: {e}") from e
