from __future__ import annotations

import hashlib

import pytest

from ark_dex_adapter.chain.identity import DEX_TRANSACTION_ID_LENGTH, address_from_public_key, derive_transaction_id
from ark_fakes import DEX_WALLET, MEMBER_A_ADDRESS, MEMBER_A_KEY, MEMBER_B_ADDRESS, MEMBER_B_KEY


def test_transaction_id_is_truncated_sender_nonce_digest():
    expected = hashlib.sha256(f"{DEX_WALLET}-7".encode("utf-8")).hexdigest()[:44]

    assert derive_transaction_id(DEX_WALLET, 7) == expected
    assert derive_transaction_id(DEX_WALLET, "7") == expected
    assert len(expected) == DEX_TRANSACTION_ID_LENGTH


def test_transaction_id_depends_on_nonce_and_sender():
    assert derive_transaction_id(DEX_WALLET, 1) != derive_transaction_id(DEX_WALLET, 2)
    assert derive_transaction_id(DEX_WALLET, 1) != derive_transaction_id(MEMBER_A_ADDRESS, 1)


@pytest.mark.parametrize(
    ("public_key", "address"),
    [(MEMBER_A_KEY, MEMBER_A_ADDRESS), (MEMBER_B_KEY, MEMBER_B_ADDRESS)],
)
def test_devnet_address_from_public_key(public_key, address):
    assert address_from_public_key(public_key, "devnet") == address


def test_mainnet_addresses_use_their_own_version_byte():
    address = address_from_public_key(MEMBER_A_KEY, "mainnet")

    assert address.startswith("A")
    assert address != MEMBER_A_ADDRESS


def test_address_rejects_malformed_keys():
    with pytest.raises(ValueError):
        address_from_public_key("02abcd", "devnet")
    with pytest.raises(ValueError):
        address_from_public_key("not-hex", "devnet")
    with pytest.raises(ValueError):
        address_from_public_key(MEMBER_A_KEY, "testnet")
