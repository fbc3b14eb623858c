"""
Wire schemas and normalized entities.

Raw API payloads are validated by the ``parse_wire_*`` functions, which raise
:class:`SchemaError` on any unexpected shape instead of letting missing fields
travel further as ``None``. Normalized entities are immutable dataclasses with
a ``to_dict`` method producing the camelCase shape expected by the DEX host.

Amounts, fees and nonces stay strings end to end so that no value is ever
rounded through a float.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .adapters.base import SchemaError

_INTEGER_STRING = re.compile(r"^-?\d+$")


class SignatureScheme(str, Enum):
    """How a wire transaction carries its signatures."""

    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True, slots=True)
class WalletInfo:
    """Multisignature membership of a wallet, in canonical member order."""

    address: str
    multisig_threshold: int
    multisig_member_public_keys: Tuple[str, ...]

    def member_index(self, public_key: str) -> Optional[int]:
        try:
            return self.multisig_member_public_keys.index(public_key)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class SignaturePacket:
    signer_address: str
    public_key: str
    signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"signerAddress": self.signer_address, "publicKey": self.public_key, "signature": self.signature}


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    id: str
    original_id: Optional[str]
    sender_address: str
    recipient_address: Optional[str]
    amount: str
    fee: str
    nonce: str
    timestamp_ms: int
    message: str = ""
    sender_public_key: Optional[str] = None
    signatures: Tuple[SignaturePacket, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "originalId": self.original_id,
            "senderAddress": self.sender_address,
            "senderPublicKey": self.sender_public_key,
            "recipientAddress": self.recipient_address,
            "amount": self.amount,
            "fee": self.fee,
            "nonce": self.nonce,
            "message": self.message,
            "timestamp": self.timestamp_ms,
            "signatures": [packet.to_dict() for packet in self.signatures],
        }


@dataclass(frozen=True, slots=True)
class NormalizedBlock:
    id: str
    height: int
    timestamp_ms: int
    transaction_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "height": self.height,
            "timestamp": self.timestamp_ms,
            "numberOfTransactions": self.transaction_count,
        }


@dataclass(frozen=True, slots=True)
class WireTransaction:
    """A transaction record as returned by ``/transactions``."""

    id: str
    sender: str
    recipient: Optional[str]
    amount: str
    fee: str
    nonce: str
    timestamp_epoch: int
    scheme: SignatureScheme
    sender_public_key: Optional[str] = None
    vendor_field: Optional[str] = None
    signature: Optional[str] = None
    signatures: Tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class WireBlock:
    id: str
    height: int
    timestamp_epoch: int
    transaction_count: int


@dataclass(frozen=True, slots=True)
class WireWallet:
    address: str
    public_key: Optional[str]
    multisig_threshold: Optional[int]
    multisig_public_keys: Optional[Tuple[str, ...]]

    @property
    def is_multisig(self) -> bool:
        return self.multisig_public_keys is not None


def _require_mapping(value: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise SchemaError(f"Expected {label} to be an object, got {type(value).__name__}.")
    return value


def _require_str(payload: Mapping[str, Any], key: str, label: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise SchemaError(f"{label} is missing string field '{key}'.")
    return value


def _optional_str(payload: Mapping[str, Any], key: str, label: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SchemaError(f"{label} field '{key}' must be a string.")
    return value


def _require_int(payload: Mapping[str, Any], key: str, label: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"{label} is missing integer field '{key}'.")
    return value


def _require_integer_string(payload: Mapping[str, Any], key: str, label: str) -> str:
    value = payload.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and _INTEGER_STRING.match(value):
        return value
    raise SchemaError(f"{label} field '{key}' must be an integer string, got {value!r}.")


def _parse_epoch(payload: Mapping[str, Any], label: str) -> int:
    timestamp = payload.get("timestamp")
    if isinstance(timestamp, Mapping):
        return _require_int(timestamp, "epoch", f"{label} timestamp")
    if isinstance(timestamp, int) and not isinstance(timestamp, bool):
        return timestamp
    raise SchemaError(f"{label} is missing its timestamp.")


def parse_wire_transaction(payload: Any) -> WireTransaction:
    """Validate one ``/transactions`` record and classify its signature scheme."""

    record = _require_mapping(payload, "transaction")
    tx_id = _require_str(record, "id", "transaction")
    label = f"transaction {tx_id}"

    signature = _optional_str(record, "signature", label)
    raw_signatures = record.get("signatures")
    if raw_signatures is not None and not isinstance(raw_signatures, list):
        raise SchemaError(f"{label} field 'signatures' must be a list.")
    if raw_signatures is not None:
        scheme = SignatureScheme.MULTI
    elif signature is not None:
        scheme = SignatureScheme.SINGLE
    else:
        raise SchemaError(f"{label} carries neither 'signature' nor 'signatures'.")

    return WireTransaction(
        id=tx_id,
        sender=_require_str(record, "sender", label),
        recipient=_optional_str(record, "recipient", label),
        amount=_require_integer_string(record, "amount", label),
        fee=_require_integer_string(record, "fee", label),
        nonce=_require_integer_string(record, "nonce", label),
        timestamp_epoch=_parse_epoch(record, label),
        scheme=scheme,
        sender_public_key=_optional_str(record, "senderPublicKey", label),
        vendor_field=_optional_str(record, "vendorField", label),
        signature=signature,
        signatures=tuple(raw_signatures or ()),
    )


def parse_wire_block(payload: Any) -> WireBlock:
    """Validate one ``/blocks`` record."""

    record = _require_mapping(payload, "block")
    block_id = _require_str(record, "id", "block")
    label = f"block {block_id}"
    if "numberOfTransactions" in record:
        count = _require_int(record, "numberOfTransactions", label)
    else:
        count = _require_int(record, "transactions", label)
    return WireBlock(
        id=block_id,
        height=_require_int(record, "height", label),
        timestamp_epoch=_parse_epoch(record, label),
        transaction_count=count,
    )


def parse_wire_wallet(payload: Any) -> WireWallet:
    """Validate a ``/wallets/{address}`` record, including its multisignature attribute."""

    record = _require_mapping(payload, "wallet")
    address = _require_str(record, "address", "wallet")
    label = f"wallet {address}"
    attributes = record.get("attributes") or {}
    _require_mapping(attributes, f"{label} attributes")
    multisig = attributes.get("multiSignature")
    threshold: Optional[int] = None
    public_keys: Optional[Tuple[str, ...]] = None
    if multisig:
        multisig = _require_mapping(multisig, f"{label} multiSignature")
        threshold = _require_int(multisig, "min", f"{label} multiSignature")
        keys = multisig.get("publicKeys")
        if not isinstance(keys, list) or not keys or not all(isinstance(key, str) and key for key in keys):
            raise SchemaError(f"{label} multiSignature.publicKeys must be a non-empty list of strings.")
        if threshold < 1 or threshold > len(keys):
            raise SchemaError(f"{label} multiSignature.min must be between 1 and {len(keys)}.")
        public_keys = tuple(keys)
    return WireWallet(
        address=address,
        public_key=_optional_str(record, "publicKey", label),
        multisig_threshold=threshold,
        multisig_public_keys=public_keys,
    )


def unwrap_data(payload: Any, label: str) -> Any:
    """Return the ``data`` member of an API envelope."""

    envelope = _require_mapping(payload, f"{label} response")
    if "data" not in envelope:
        raise SchemaError(f"{label} response has no 'data' member.")
    return envelope["data"]


def unwrap_list(payload: Any, label: str) -> List[Any]:
    data = unwrap_data(payload, label)
    if not isinstance(data, list):
        raise SchemaError(f"{label} response 'data' must be a list.")
    return data
