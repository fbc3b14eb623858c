"""
Adapter context created once at startup.

The context bundles the immutable configuration with the HTTP client and a
logger tagged with the module alias. Services receive it explicitly instead of
reading module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import LoggerAdapter
from typing import Mapping, Optional

import httpx

from ..adapters.api.ark import ArkClient
from ..config import AdapterConfig
from .logging import get_logger as _get_logger


@dataclass(frozen=True, slots=True)
class AdapterContext:
    """
    Shared, read-only state handed to every service.

    Attributes
    ----------
    config:
        Settings resolved at startup.
    client:
        ARK API client bound to ``config.resolved_api_url``.
    """

    config: AdapterConfig
    client: ArkClient

    @classmethod
    def build(cls, config: AdapterConfig, *, transport: Optional[httpx.BaseTransport] = None) -> "AdapterContext":
        """
        Construct the context and its API client from ``config``.

        Parameters
        ----------
        transport:
            Optional HTTPX transport forwarded to the client; tests pass an
            :class:`httpx.MockTransport`.
        """

        client = ArkClient(
            base_url=config.resolved_api_url,
            timeout=config.timeout,
            attempts=config.request_attempts,
            max_page_size=config.max_api_records,
            transport=transport,
        )
        return cls(config=config, client=client)

    def get_logger(self, name: str, *, extra: Optional[Mapping[str, object]] = None) -> LoggerAdapter:
        """Return a logger tagged with the module alias and network."""

        return _get_logger(name, tags=(self.config.alias, self.config.network), extra=extra)
