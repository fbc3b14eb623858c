"""
Shared HTTP utilities for the ARK REST API client.

The helper is a thin HTTPX wrapper: it keeps the code synchronous, bounds every
request with a timeout, retries idempotent requests on transport faults and
classifies failures so that "not found", "rejected" and "network trouble" stay
distinguishable for the callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Mapping, MutableMapping, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...core.logging import get_logger
from ..base import AdapterError, TransportError

DEFAULT_TIMEOUT = 10.0
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


class APIError(AdapterError):
    """Raised when the API answers with an error status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None, cause: Optional[BaseException] = None) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.payload = payload


class NotFoundError(APIError):
    """HTTP 404 from the API."""


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


@dataclass(slots=True)
class BaseAPIClient:
    """
    Base synchronous HTTP client with retry support.

    Parameters
    ----------
    base_url:
        Root URL for the upstream service.
    timeout:
        Request timeout in seconds.
    attempts:
        Attempts for idempotent requests failing at the transport layer.
    default_headers:
        Headers automatically attached to every request.
    transport:
        Optional HTTPX transport, e.g. :class:`httpx.MockTransport` in tests.
    """

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    attempts: int = 3
    default_headers: MutableMapping[str, str] = field(default_factory=dict)
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(
            f"{self.__class__.__module__}.{self.__class__.__name__}",
            extra={"base_url": self.base_url},
        )

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=dict(self.default_headers),
            follow_redirects=True,
            transport=self.transport,
        )

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        request = response.request
        status = response.status_code
        payload = _decode_body(response)
        message = f"HTTP {status} error for {request.method} {request.url}"
        if status == 404:
            raise NotFoundError(message, status_code=status, payload=payload)
        if status >= 500:
            raise TransportError(f"{message}: {response.text}")
        raise APIError(f"{message}: {response.text}", status_code=status, payload=payload)

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        with self._build_client() as client:
            return client.request(method, url, **kwargs)

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        self.logger.debug("HTTP request", extra={"method": method, "url": url})
        attempts = self.attempts if method.upper() in _IDEMPOTENT_METHODS else 1

        sender = retry(
            retry=retry_if_exception_type(httpx.TransportError),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
            stop=stop_after_attempt(attempts),
            reraise=True,
        )(self._send)

        try:
            response = sender(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            self.logger.error("HTTP request timed out", extra={"method": method, "url": url, "error": str(exc)})
            raise TransportError(f"Timed out calling {method} {url}", cause=exc) from exc
        except httpx.HTTPError as exc:
            self.logger.error("HTTP error during request", extra={"method": method, "url": url, "error": str(exc)})
            raise TransportError(f"HTTP error while calling {method} {url}: {exc}", cause=exc) from exc

        self.logger.debug("HTTP response", extra={"status_code": response.status_code, "url": str(response.url)})
        self._raise_for_status(response)
        return response

    def _get_json(self, url: str, *, params: Optional[Mapping[str, Any]] = None) -> Any:
        response = self._request("GET", url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise APIError(f"Failed to decode JSON from {response.url}: {exc}", status_code=response.status_code, cause=exc) from exc

    def _post_json(self, url: str, *, json_body: Optional[Mapping[str, Any]] = None) -> Any:
        response = self._request("POST", url, json=json_body)
        try:
            return response.json()
        except ValueError as exc:
            raise APIError(f"Failed to decode JSON from {response.url}: {exc}", status_code=response.status_code, cause=exc) from exc
