"""Conversion between ARK epoch seconds and universal millisecond timestamps."""

from __future__ import annotations

# ARK genesis, 2017-03-21T13:00:00Z, in unix seconds.
CHAIN_EPOCH_OFFSET = 1490101200


def to_universal_millis(native_epoch_seconds: int) -> int:
    """Convert seconds since the ARK epoch to unix milliseconds."""

    return (int(native_epoch_seconds) + CHAIN_EPOCH_OFFSET) * 1000


def to_native_epoch_seconds(universal_millis: int) -> int:
    """
    Convert unix milliseconds to seconds since the ARK epoch.

    Rounds half up to the nearest second and clamps to 0: the chain has no time
    before its own genesis.
    """

    seconds = (int(universal_millis) + 500) // 1000
    return max(0, seconds - CHAIN_EPOCH_OFFSET)
