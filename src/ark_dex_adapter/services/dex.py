"""
DEX-facing façade over the ARK API.

Each public method implements one host action. Failures are translated into
:class:`InvalidActionError` kinds the DEX understands; :class:`TransportError`
passes through untouched so that callers can tell a flaky network apart from a
missing account or block.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Dict, List, Mapping, Optional, Union

from .. import __version__
from ..adapters.api.base import APIError
from ..adapters.api.query import ORDER_DIRECTIONS
from ..adapters.base import (
    ACCOUNT_QUERY_ERROR,
    ACCOUNT_WAS_NOT_MULTISIG,
    BLOCK_DID_NOT_EXIST,
    MULTISIG_ACCOUNT_DID_NOT_EXIST,
    TRANSACTION_BROADCAST_ERROR,
    InvalidActionError,
    SchemaError,
    SignatureError,
    WalletNotFoundError,
    WalletNotMultisigError,
)
from ..chain.identity import address_from_public_key
from ..chain.timestamps import to_native_epoch_seconds
from ..core.context import AdapterContext
from ..core.logging import bind_context, log_progress
from ..mapping import map_block, map_transaction, transaction_from_dict, unmap_transaction
from ..models import NormalizedBlock, NormalizedTransaction, WalletInfo
from .wallet import WalletInfoResolver

DEFAULT_TRANSACTION_LIMIT = 100
_DEFAULT_BROADCAST_REASON = "Transaction was rejected by the ARK network."


def _broadcast_reason(body: Any) -> Optional[str]:
    """Extract the remote rejection reason from a broadcast response body."""

    if not isinstance(body, Mapping):
        return body if isinstance(body, str) and body else None
    messages: List[str] = []
    errors = body.get("errors")
    if isinstance(errors, Mapping):
        for key, entries in errors.items():
            for entry in entries if isinstance(entries, list) else [entries]:
                if isinstance(entry, Mapping):
                    text = entry.get("message") or entry.get("type")
                else:
                    text = entry
                if text:
                    messages.append(f"{key}: {text}")
    if messages:
        return "; ".join(messages)
    message = body.get("message")
    return message if isinstance(message, str) and message else None


@dataclass(slots=True)
class DexAdapter:
    """Query and broadcast operations exposed to the DEX."""

    context: AdapterContext
    resolver: Optional[WalletInfoResolver] = None
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.context.get_logger(self.__class__.__name__)
        if self.resolver is None:
            self.resolver = WalletInfoResolver(client=self.context.client, logger=self.logger)

    @property
    def network(self) -> str:
        return self.context.config.network

    def get_status(self) -> Dict[str, Any]:
        return {"version": __version__}

    # Wallets -----------------------------------------------------------------

    def _resolve_wallet(self, wallet_address: str) -> WalletInfo:
        try:
            return self.resolver.resolve(wallet_address)
        except WalletNotFoundError as exc:
            raise InvalidActionError(MULTISIG_ACCOUNT_DID_NOT_EXIST, f"Error getting multisig account with address {wallet_address}", exc) from exc
        except WalletNotMultisigError as exc:
            raise InvalidActionError(ACCOUNT_WAS_NOT_MULTISIG, f"Account with address {wallet_address} is not a multisig account", exc) from exc
        except APIError as exc:
            raise InvalidActionError(MULTISIG_ACCOUNT_DID_NOT_EXIST, f"Error getting multisig account with address {wallet_address}", exc) from exc

    def dex_wallet_info(self) -> WalletInfo:
        """Membership of the configured DEX wallet; gates every signature reconciliation."""

        return self._resolve_wallet(self.context.config.require_wallet_address())

    def get_multisig_wallet_members(self, wallet_address: str) -> List[str]:
        info = self._resolve_wallet(wallet_address)
        return [address_from_public_key(key, self.network) for key in info.multisig_member_public_keys]

    def get_min_multisig_required_signatures(self, wallet_address: str) -> int:
        return self._resolve_wallet(wallet_address).multisig_threshold

    # Transactions ------------------------------------------------------------

    def _fetch_transactions(
        self,
        params: Mapping[str, Any],
        *,
        max_total: int,
        wallet_address: str,
        action: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[NormalizedTransaction]:
        wallet_info = self.dex_wallet_info()
        try:
            records = self.context.client.list_transactions(params, max_total=max_total, cancel_event=cancel_event)
        except APIError as exc:
            raise InvalidActionError(ACCOUNT_QUERY_ERROR, f"Error getting transactions with account address {wallet_address}", exc) from exc
        transactions = [map_transaction(record, wallet_info, self.network) for record in records]
        log_progress(bind_context(self.logger, wallet=wallet_address), "Fetched transactions", action=action, status="ok", level=logging.DEBUG, extra={"total": len(transactions)})
        return transactions

    def _get_transactions_from_timestamp(
        self,
        address_filter: str,
        wallet_address: str,
        from_timestamp_ms: Optional[int],
        limit: Optional[int],
        order: str,
        *,
        action: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[NormalizedTransaction]:
        order = (order or "asc").lower()
        if order not in ORDER_DIRECTIONS:
            raise ValueError(f"Unsupported order '{order}'. Expected 'asc' or 'desc'.")
        max_total = DEFAULT_TRANSACTION_LIMIT if limit is None else int(limit)
        if max_total <= 0:
            return []
        params: Dict[str, Any] = {address_filter: wallet_address, "orderBy": ("timestamp", order)}
        if from_timestamp_ms is not None:
            bound = "timestamp.from" if order == "asc" else "timestamp.to"
            params[bound] = to_native_epoch_seconds(from_timestamp_ms)
        transactions = self._fetch_transactions(params, max_total=max_total, wallet_address=wallet_address, action=action, cancel_event=cancel_event)
        if from_timestamp_ms is None:
            return transactions
        if order == "asc":
            return [txn for txn in transactions if txn.timestamp_ms >= from_timestamp_ms]
        return [txn for txn in transactions if txn.timestamp_ms <= from_timestamp_ms]

    def get_outbound_transactions(
        self,
        wallet_address: str,
        from_timestamp_ms: Optional[int] = None,
        limit: Optional[int] = None,
        order: str = "asc",
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[NormalizedTransaction]:
        """
        Transactions sent by ``wallet_address``.

        With ``order="asc"`` only transactions at or after ``from_timestamp_ms``
        are returned, oldest first; with ``order="desc"`` only those at or
        before it, newest first.
        """

        return self._get_transactions_from_timestamp(
            "senderId", wallet_address, from_timestamp_ms, limit, order, action="getOutboundTransactions", cancel_event=cancel_event
        )

    def get_inbound_transactions(
        self,
        wallet_address: str,
        from_timestamp_ms: Optional[int] = None,
        limit: Optional[int] = None,
        order: str = "asc",
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[NormalizedTransaction]:
        """Transactions received by ``wallet_address``; same ordering rules as outbound."""

        return self._get_transactions_from_timestamp(
            "recipientId", wallet_address, from_timestamp_ms, limit, order, action="getInboundTransactions", cancel_event=cancel_event
        )

    def get_inbound_transactions_from_block(self, wallet_address: str, block_id: str, *, cancel_event: Optional[threading.Event] = None) -> List[NormalizedTransaction]:
        params = {"recipientId": wallet_address, "blockId": block_id, "orderBy": ("timestamp", "asc")}
        return self._fetch_transactions(
            params,
            max_total=self.context.config.max_transactions_per_block,
            wallet_address=wallet_address,
            action="getInboundTransactionsFromBlock",
            cancel_event=cancel_event,
        )

    def get_outbound_transactions_from_block(self, wallet_address: str, block_id: str, *, cancel_event: Optional[threading.Event] = None) -> List[NormalizedTransaction]:
        params = {"senderId": wallet_address, "blockId": block_id, "orderBy": ("timestamp", "asc")}
        return self._fetch_transactions(
            params,
            max_total=self.context.config.max_transactions_per_block,
            wallet_address=wallet_address,
            action="getOutboundTransactionsFromBlock",
            cancel_event=cancel_event,
        )

    # Blocks ------------------------------------------------------------------

    def _fetch_blocks(self, params: Mapping[str, Any], *, max_total: int, cancel_event: Optional[threading.Event] = None) -> List[NormalizedBlock]:
        records = self.context.client.list_blocks(params, max_total=max_total, cancel_event=cancel_event)
        return [map_block(record) for record in records]

    def get_max_block_height(self) -> int:
        return self.context.client.get_chain_height()

    def get_blocks_between_heights(
        self,
        from_height: int,
        to_height: int,
        limit: int,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[NormalizedBlock]:
        """Blocks with ``from_height < height <= to_height``, ascending, at most ``limit``."""

        max_total = min(int(limit), int(to_height) - int(from_height))
        if max_total <= 0:
            return []
        params = {"height.from": int(from_height) + 1, "height.to": int(to_height), "orderBy": ("height", "asc")}
        try:
            blocks = self._fetch_blocks(params, max_total=max_total, cancel_event=cancel_event)
        except APIError as exc:
            if exc.status_code == 422:
                return []
            raise
        in_range = [block for block in blocks if from_height < block.height <= to_height]
        return sorted(in_range, key=lambda block: block.height)

    def get_block_at_height(self, height: int) -> NormalizedBlock:
        try:
            blocks = self._fetch_blocks({"height": int(height)}, max_total=1)
        except APIError as exc:
            raise InvalidActionError(BLOCK_DID_NOT_EXIST, f"Error getting block at height {height}", exc) from exc
        if not blocks or blocks[0].height != int(height):
            raise InvalidActionError(BLOCK_DID_NOT_EXIST, f"Error getting block at height {height}")
        return blocks[0]

    def get_last_block_at_timestamp(self, timestamp_ms: int) -> NormalizedBlock:
        """Newest block forged at or before ``timestamp_ms``."""

        params = {"timestamp.to": to_native_epoch_seconds(timestamp_ms), "orderBy": ("height", "desc")}
        try:
            blocks = self._fetch_blocks(params, max_total=1)
        except APIError as exc:
            raise InvalidActionError(BLOCK_DID_NOT_EXIST, f"Error getting block at timestamp {timestamp_ms}", exc) from exc
        if not blocks:
            raise InvalidActionError(BLOCK_DID_NOT_EXIST, f"Error getting block at timestamp {timestamp_ms}")
        return blocks[0]

    # Broadcast ---------------------------------------------------------------

    def post_transaction(self, transaction: Union[NormalizedTransaction, Mapping[str, Any]]) -> None:
        """
        Broadcast a signed multisignature transfer.

        Raises :class:`InvalidActionError` of kind ``TransactionBroadcastError``
        with the remote reason when the network rejects it.
        """

        wallet_info = self.dex_wallet_info()
        try:
            normalized = transaction if isinstance(transaction, NormalizedTransaction) else transaction_from_dict(dict(transaction))
            payload = unmap_transaction(normalized, wallet_info, self.network)
        except (SchemaError, SignatureError) as exc:
            raise InvalidActionError(TRANSACTION_BROADCAST_ERROR, f"Error preparing transaction for broadcast: {exc.message}", exc) from exc

        try:
            body = self.context.client.post_transactions([payload])
        except APIError as exc:
            reason = _broadcast_reason(exc.payload) or _DEFAULT_BROADCAST_REASON
            raise InvalidActionError(TRANSACTION_BROADCAST_ERROR, reason, exc) from exc

        reason = _broadcast_reason(body)
        data = body.get("data")
        accepted = data.get("accept") if isinstance(data, Mapping) else None
        if reason or (isinstance(accepted, list) and not accepted):
            raise InvalidActionError(TRANSACTION_BROADCAST_ERROR, reason or _DEFAULT_BROADCAST_REASON)
        log_progress(self.logger, "Transaction broadcast", action="postTransaction", status="accepted", extra={"nonce": normalized.nonce})
