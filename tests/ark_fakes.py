"""Shared fakes: an in-memory ARK REST API and record builders."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

API_URL = "https://ark.test/api"
DEX_WALLET = "DMwCauULKf1edh4WVTYVEfZt9CouMqxDuV"
PLAIN_WALLET = "DTY1sPZrWDynB5zDYrhuv1oZ5SHNfc7Bnm"
MEMBER_A_KEY = "02bb3481404dfc0e441fa6dac4a5eae9c218c6145d09522e0ebe4aa944315dac26"
MEMBER_A_ADDRESS = "DRFp1KVCuCMFLPFrHzbH8eYdPUoNwTXWzV"
MEMBER_B_KEY = "02a2390273dca76d9e2ec9b5b181294d7e1251f5f4e8e268ef062ec00c98e13480"
MEMBER_B_ADDRESS = "DRzgcj97d3hFdLJjYhPTdBQNVeb92mzrx5"
SIG_A = "aa" * 64
SIG_B = "bb" * 64


def make_transaction(
    tx_id: str,
    *,
    sender: str = DEX_WALLET,
    recipient: str = MEMBER_A_ADDRESS,
    nonce: int = 1,
    epoch: int = 1000,
    block_id: str = "block-1",
    signatures: Optional[List[str]] = None,
    vendor_field: Optional[str] = None,
) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": tx_id,
        "blockId": block_id,
        "sender": sender,
        "senderPublicKey": MEMBER_A_KEY,
        "recipient": recipient,
        "amount": "100000000",
        "fee": "10000000",
        "nonce": str(nonce),
        "timestamp": {"epoch": epoch, "unix": epoch + 1490101200, "human": "-"},
        "signatures": list(signatures) if signatures is not None else ["01" + SIG_B],
    }
    if vendor_field is not None:
        record["vendorField"] = vendor_field
    return record


def make_block(height: int, *, epoch: Optional[int] = None, transactions: int = 0) -> Dict[str, Any]:
    return {
        "id": f"block-{height}",
        "height": height,
        "transactions": transactions,
        "timestamp": {"epoch": epoch if epoch is not None else height * 8, "unix": 0, "human": "-"},
    }


def _order(records: List[Dict[str, Any]], order_by: Optional[str]) -> List[Dict[str, Any]]:
    if not order_by:
        return records
    field_name, _, direction = order_by.partition(":")

    def key(record: Dict[str, Any]) -> Any:
        value = record.get(field_name)
        return value["epoch"] if isinstance(value, dict) else value

    return sorted(records, key=key, reverse=direction == "desc")


@dataclass
class FakeArkAPI:
    """In-memory stand-in for the ARK REST API served through ``httpx.MockTransport``."""

    wallets: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    transactions: List[Dict[str, Any]] = field(default_factory=list)
    blocks: List[Dict[str, Any]] = field(default_factory=list)
    height: int = 0
    failures: Dict[Tuple[str, str], Any] = field(default_factory=dict)
    post_response: Tuple[int, Any] = (200, {"data": {"accept": ["remote-id"], "invalid": []}})
    requests: List[httpx.Request] = field(default_factory=list)
    posted: List[Dict[str, Any]] = field(default_factory=list)

    def fail(self, method: str, resource: str, outcome: Any) -> None:
        """Answer ``method`` on ``/resource`` with an HTTP status or raise ``outcome``."""

        self.failures[(method, resource)] = outcome

    def requests_to(self, resource: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == f"/api/{resource}"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/api/") :]
        resource = path.split("/", 1)[0]
        outcome = self.failures.get((request.method, resource))
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return httpx.Response(outcome, json={"statusCode": outcome, "message": "forced failure"})

        if request.method == "POST" and resource == "transactions":
            self.posted.append(json.loads(request.content))
            status, body = self.post_response
            return httpx.Response(status, json=body)
        if resource == "wallets":
            wallet = self.wallets.get(path.split("/", 1)[1])
            if wallet is None:
                return httpx.Response(404, json={"statusCode": 404, "error": "Not Found", "message": "Wallet not found"})
            return httpx.Response(200, json={"data": wallet})
        if resource == "blockchain":
            return httpx.Response(200, json={"data": {"block": {"height": self.height, "id": f"block-{self.height}"}, "supply": "0"}})
        if resource == "transactions":
            return self._page(self._filter_transactions(request.url.params), request.url.params)
        if resource == "blocks":
            return self._page(self._filter_blocks(request.url.params), request.url.params)
        return httpx.Response(404, json={"message": "unknown route"})

    def _filter_transactions(self, params: httpx.QueryParams) -> List[Dict[str, Any]]:
        records = list(self.transactions)
        if "senderId" in params:
            records = [r for r in records if r["sender"] == params["senderId"]]
        if "recipientId" in params:
            records = [r for r in records if r["recipient"] == params["recipientId"]]
        if "blockId" in params:
            records = [r for r in records if r["blockId"] == params["blockId"]]
        if "timestamp.from" in params:
            records = [r for r in records if r["timestamp"]["epoch"] >= int(params["timestamp.from"])]
        if "timestamp.to" in params:
            records = [r for r in records if r["timestamp"]["epoch"] <= int(params["timestamp.to"])]
        return _order(records, params.get("orderBy"))

    def _filter_blocks(self, params: httpx.QueryParams) -> List[Dict[str, Any]]:
        records = list(self.blocks)
        if "height" in params:
            records = [r for r in records if r["height"] == int(params["height"])]
        if "height.from" in params:
            records = [r for r in records if r["height"] >= int(params["height.from"])]
        if "height.to" in params:
            records = [r for r in records if r["height"] <= int(params["height.to"])]
        if "timestamp.to" in params:
            records = [r for r in records if r["timestamp"]["epoch"] <= int(params["timestamp.to"])]
        return _order(records, params.get("orderBy"))

    @staticmethod
    def _page(records: List[Dict[str, Any]], params: httpx.QueryParams) -> httpx.Response:
        offset = int(params.get("offset", 0))
        limit = int(params.get("limit", 100))
        return httpx.Response(200, json={"meta": {"totalCount": len(records)}, "data": records[offset : offset + limit]})


