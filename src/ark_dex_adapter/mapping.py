"""Shape raw ARK API records into normalized DEX entities and back."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .adapters.base import SchemaError, SignatureError
from .chain.identity import NETWORK_ADDRESS_VERSIONS, derive_transaction_id
from .chain.signatures import compact_signatures, signatures_for_transaction
from .chain.timestamps import to_universal_millis
from .models import NormalizedBlock, NormalizedTransaction, SignaturePacket, WalletInfo, parse_wire_block, parse_wire_transaction

TRANSFER_TYPE = 0
CORE_TYPE_GROUP = 1
TRANSACTION_VERSION = 2


def map_transaction(raw: Any, wallet_info: Optional[WalletInfo], network: str) -> NormalizedTransaction:
    """
    Normalize one ``/transactions`` record.

    ``wallet_info`` must be resolved: without the canonical member list the
    signature positions cannot be interpreted.
    """

    if wallet_info is None:
        raise SignatureError("Wallet info is not resolved; cannot reconcile transaction signatures.")
    wire = parse_wire_transaction(raw)
    return NormalizedTransaction(
        id=derive_transaction_id(wire.sender, wire.nonce),
        original_id=wire.id,
        sender_address=wire.sender,
        sender_public_key=wire.sender_public_key,
        recipient_address=wire.recipient,
        amount=wire.amount,
        fee=wire.fee,
        nonce=wire.nonce,
        message=wire.vendor_field or "",
        timestamp_ms=to_universal_millis(wire.timestamp_epoch),
        signatures=tuple(signatures_for_transaction(wire, wallet_info, network)),
    )


def map_block(raw: Any) -> NormalizedBlock:
    wire = parse_wire_block(raw)
    return NormalizedBlock(
        id=wire.id,
        height=wire.height,
        timestamp_ms=to_universal_millis(wire.timestamp_epoch),
        transaction_count=wire.transaction_count,
    )


def unmap_transaction(transaction: NormalizedTransaction, wallet_info: WalletInfo, network: str) -> Dict[str, Any]:
    """
    Rebuild the ARK v2 transfer payload for ``POST /transactions``.

    Only present signatures are kept, in canonical member order.
    """

    if not transaction.sender_public_key:
        raise SignatureError(f"Transaction {transaction.id} has no sender public key.")
    if not transaction.recipient_address:
        raise SignatureError(f"Transaction {transaction.id} has no recipient.")
    signatures = compact_signatures(transaction.signatures, wallet_info)
    if not signatures:
        raise SignatureError(f"Transaction {transaction.id} carries no signature.")
    if len(signatures) < wallet_info.multisig_threshold:
        raise SignatureError(
            f"Transaction {transaction.id} has {len(signatures)} signatures; wallet {wallet_info.address} requires {wallet_info.multisig_threshold}."
        )
    payload: Dict[str, Any] = {
        "version": TRANSACTION_VERSION,
        "network": NETWORK_ADDRESS_VERSIONS[network],
        "typeGroup": CORE_TYPE_GROUP,
        "type": TRANSFER_TYPE,
        "nonce": transaction.nonce,
        "senderPublicKey": transaction.sender_public_key,
        "fee": transaction.fee,
        "amount": transaction.amount,
        "recipientId": transaction.recipient_address,
        "signatures": signatures,
    }
    if transaction.message:
        payload["vendorField"] = transaction.message
    return payload


def transaction_from_dict(payload: Any) -> NormalizedTransaction:
    """Build a :class:`NormalizedTransaction` from the host's camelCase dictionary."""

    if not isinstance(payload, dict):
        raise SchemaError("Transaction must be an object.")
    if any(isinstance(payload.get(key), float) for key in ("amount", "fee", "nonce")):
        raise SchemaError("amount, fee and nonce must be integer strings, not floats.")
    try:
        packets = tuple(
            SignaturePacket(
                signer_address=str(entry.get("signerAddress") or ""),
                public_key=str(entry["publicKey"]),
                signature=entry.get("signature") or None,
            )
            for entry in payload.get("signatures") or ()
        )
        sender = str(payload["senderAddress"])
        nonce = str(payload["nonce"])
        return NormalizedTransaction(
            id=str(payload.get("id") or derive_transaction_id(sender, nonce)),
            original_id=payload.get("originalId"),
            sender_address=sender,
            sender_public_key=payload.get("senderPublicKey"),
            recipient_address=payload.get("recipientAddress"),
            amount=str(payload["amount"]),
            fee=str(payload["fee"]),
            nonce=nonce,
            message=str(payload.get("message") or ""),
            timestamp_ms=int(payload.get("timestamp") or 0),
            signatures=packets,
        )
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise SchemaError(f"Malformed transaction object: {exc}") from exc
