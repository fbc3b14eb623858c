"""
Adapters for the ARK network.

The error hierarchy lives in :mod:`.base`; the REST client and its request
helpers live in :mod:`.api`.
"""

from .base import (
    AdapterConfigError,
    AdapterError,
    FetchCancelledError,
    InvalidActionError,
    SchemaError,
    SignatureError,
    TransportError,
    WalletNotFoundError,
    WalletNotMultisigError,
)

__all__ = [
    "AdapterConfigError",
    "AdapterError",
    "FetchCancelledError",
    "InvalidActionError",
    "SchemaError",
    "SignatureError",
    "TransportError",
    "WalletNotFoundError",
    "WalletNotMultisigError",
]
