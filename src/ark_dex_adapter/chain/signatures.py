"""
Multisignature reconciliation.

Wire format
-----------
A multisignature transaction exposes ``signatures``: a list of hex strings
whose first byte is the position of the signing member in the wallet's
canonical member list, followed by the signature itself::

    "01" + "7462...cd53"   ->   member 1 signed with "7462...cd53"

The list is sparse (non-signers are missing) and unordered. Reconciliation
turns it into exactly one :class:`SignaturePacket` per member, in canonical
order, leaving ``signature`` as ``None`` for members who have not signed yet.
For broadcast the inverse, :func:`compact_signatures`, keeps only the present
signatures and re-applies the position byte.
"""

from __future__ import annotations

import string
from logging import LoggerAdapter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..adapters.base import SignatureError
from ..core.logging import get_logger
from ..models import SignaturePacket, SignatureScheme, WalletInfo, WireTransaction
from .identity import address_from_public_key

INDEX_PREFIX_LENGTH = 2
_HEX_DIGITS = frozenset(string.hexdigits)

_LOGGER = get_logger(__name__)


def _is_well_formed(entry: Any) -> bool:
    return (
        isinstance(entry, str)
        and len(entry) > INDEX_PREFIX_LENGTH
        and len(entry) % 2 == 0
        and all(char in _HEX_DIGITS for char in entry)
    )


def decode_signatures(entries: Iterable[Any], *, logger: Optional[LoggerAdapter] = None) -> Dict[int, str]:
    """
    Decode index-prefixed signatures into a sparse ``{position: signature}`` map.

    Malformed entries are skipped. When two entries claim the same position the
    first one is kept.
    """

    log = logger or _LOGGER
    sparse: Dict[int, str] = {}
    for entry in entries:
        if not _is_well_formed(entry):
            log.debug("Ignoring malformed signature entry", extra={"entry": repr(entry)[:32]})
            continue
        index = int(entry[:INDEX_PREFIX_LENGTH], 16)
        if index in sparse:
            log.debug("Ignoring duplicate signature position", extra={"position": index})
            continue
        sparse[index] = entry[INDEX_PREFIX_LENGTH:]
    return sparse


def encode_signature(index: int, signature: str) -> str:
    if not 0 <= index <= 0xFF:
        raise SignatureError(f"Signature position {index} does not fit in one byte.")
    return f"{index:02x}{signature}"


def reconcile_signatures(sparse: Mapping[int, str], wallet_info: WalletInfo, network: str) -> List[SignaturePacket]:
    """One packet per member in canonical order; positions outside the member list are dropped."""

    return [
        SignaturePacket(
            signer_address=address_from_public_key(public_key, network),
            public_key=public_key,
            signature=sparse.get(position),
        )
        for position, public_key in enumerate(wallet_info.multisig_member_public_keys)
    ]


def signatures_for_transaction(transaction: WireTransaction, wallet_info: WalletInfo, network: str) -> List[SignaturePacket]:
    """
    Reconcile the signatures of a wire transaction against ``wallet_info``.

    Multisignature transactions decode their ``signatures`` list. A single
    signature is attributed to the sender's member position when the sender
    public key belongs to the wallet; otherwise no member is marked as signed.
    """

    if transaction.scheme is SignatureScheme.MULTI:
        sparse = decode_signatures(transaction.signatures)
    else:
        position = wallet_info.member_index(transaction.sender_public_key) if transaction.sender_public_key else None
        sparse = {position: transaction.signature} if position is not None and transaction.signature else {}
    return reconcile_signatures(sparse, wallet_info, network)


def compact_signatures(packets: Sequence[SignaturePacket], wallet_info: WalletInfo) -> List[str]:
    """
    Encode the present signatures for broadcast.

    Signatures are ordered by canonical member position and prefixed with that
    position. Packets signed by a key outside the member list are rejected.
    """

    by_position: Dict[int, str] = {}
    for packet in packets:
        if not packet.signature:
            continue
        position = wallet_info.member_index(packet.public_key)
        if position is None:
            raise SignatureError(f"Public key {packet.public_key} is not a member of wallet {wallet_info.address}.")
        by_position.setdefault(position, packet.signature)
    return [encode_signature(position, by_position[position]) for position in sorted(by_position)]
