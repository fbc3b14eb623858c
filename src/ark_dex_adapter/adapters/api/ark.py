"""
ARK public REST API client.

Reference: https://api.ark.dev/public-rest-api/getting-started

Single-entity lookups (``/wallets/{address}``, ``/blockchain``) raise
:class:`NotFoundError` on 404. Search endpoints (``/transactions``, ``/blocks``)
treat 404 as an empty page.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

import httpx

from ...models import unwrap_data, unwrap_list
from ..base import SchemaError
from .base import BaseAPIClient, NotFoundError
from .pagination import fetch_paginated
from .query import build_query

DEFAULT_BASE_URL = "https://api.ark.io/api"
MAX_API_RECORDS = 100


class ArkClient(BaseAPIClient):
    """Thin client over the ARK endpoints used by the DEX adapter."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        attempts: int = 3,
        max_page_size: int = MAX_API_RECORDS,
        default_headers: Optional[MutableMapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers: MutableMapping[str, str] = {"Accept": "application/json", "User-Agent": "ark-dex-adapter"}
        if default_headers:
            headers.update(default_headers)
        super().__init__(base_url=base_url, timeout=timeout, attempts=attempts, default_headers=headers, transport=transport)
        self.max_page_size = max_page_size

    def get_wallet(self, address: str) -> Dict[str, Any]:
        """Return the raw wallet record. Raises :class:`NotFoundError` when absent."""

        data = unwrap_data(self._get_json(f"/wallets/{address}"), "wallet")
        if not isinstance(data, dict):
            raise NotFoundError(f"Wallet {address} not found.", status_code=404)
        return data

    def search(self, resource: str, params: Mapping[str, Any], *, offset: int, limit: int) -> List[Any]:
        """Fetch one page of ``/transactions`` or ``/blocks``; 404 yields an empty page."""

        query = build_query({**params, "offset": offset, "limit": limit})
        try:
            payload = self._get_json(f"/{resource}{query}")
        except NotFoundError:
            return []
        return unwrap_list(payload, resource)

    def search_all(
        self,
        resource: str,
        params: Mapping[str, Any],
        *,
        max_total: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Any]:
        """Page through a search endpoint until ``max_total`` records or exhaustion."""

        return fetch_paginated(
            lambda offset, limit: self.search(resource, params, offset=offset, limit=limit),
            max_total=max_total,
            max_page_size=self.max_page_size,
            cancel_event=cancel_event,
            logger=self.logger,
        )

    def list_transactions(self, params: Mapping[str, Any], *, max_total: int, cancel_event: Optional[threading.Event] = None) -> List[Any]:
        return self.search_all("transactions", params, max_total=max_total, cancel_event=cancel_event)

    def list_blocks(self, params: Mapping[str, Any], *, max_total: int, cancel_event: Optional[threading.Event] = None) -> List[Any]:
        return self.search_all("blocks", params, max_total=max_total, cancel_event=cancel_event)

    def get_chain_height(self) -> int:
        data = unwrap_data(self._get_json("/blockchain"), "blockchain")
        block = data.get("block") if isinstance(data, dict) else None
        height = block.get("height") if isinstance(block, dict) else None
        if isinstance(height, bool) or not isinstance(height, int):
            raise SchemaError("blockchain response has no integer block height.")
        return height

    def post_transactions(self, transactions: List[Mapping[str, Any]]) -> Dict[str, Any]:
        """Submit transactions; returns the raw response body."""

        payload = self._post_json("/transactions", json_body={"transactions": list(transactions)})
        if not isinstance(payload, dict):
            raise SchemaError("Unexpected payload from transaction broadcast.")
        return payload
