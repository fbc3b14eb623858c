"""
Identifiers derived from chain data.

* DEX transaction ids: ``sha256("{sender}-{nonce}")`` truncated to 44 hex
  characters. The pair (sender, nonce) identifies a transaction on any
  nonce-based account model, so the id is stable across re-fetches and does
  not depend on the payload.
* ARK addresses: base58check of the network version byte followed by the
  RIPEMD-160 digest of the compressed public key.
"""

from __future__ import annotations

import hashlib
from functools import lru_cache

import base58
from Crypto.Hash import RIPEMD160

DEX_TRANSACTION_ID_LENGTH = 44
NETWORK_ADDRESS_VERSIONS = {
    "mainnet": 23,
    "devnet": 30,
}


def derive_transaction_id(sender_address: str, nonce: int | str) -> str:
    digest = hashlib.sha256(f"{sender_address}-{nonce}".encode("utf-8")).hexdigest()
    return digest[:DEX_TRANSACTION_ID_LENGTH]


@lru_cache(maxsize=256)
def address_from_public_key(public_key: str, network: str = "mainnet") -> str:
    """Derive the ARK address of a hex-encoded compressed public key."""

    try:
        version = NETWORK_ADDRESS_VERSIONS[network]
    except KeyError as exc:
        raise ValueError(f"Unknown network '{network}'.") from exc
    key_bytes = bytes.fromhex(public_key)
    if len(key_bytes) != 33:
        raise ValueError(f"Expected a 33-byte compressed public key, got {len(key_bytes)} bytes.")
    key_hash = RIPEMD160.new(key_bytes).digest()
    return base58.b58encode_check(bytes([version]) + key_hash).decode("ascii")
