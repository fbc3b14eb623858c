"""ARK chain conventions: epoch timestamps, addresses and signature slots."""

from .identity import address_from_public_key, derive_transaction_id
from .signatures import compact_signatures, decode_signatures, reconcile_signatures
from .timestamps import to_native_epoch_seconds, to_universal_millis

__all__ = [
    "address_from_public_key",
    "compact_signatures",
    "decode_signatures",
    "derive_transaction_id",
    "reconcile_signatures",
    "to_native_epoch_seconds",
    "to_universal_millis",
]
