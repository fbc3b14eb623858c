"""Resolution and caching of multisignature wallet membership."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Dict, Optional

from ..adapters.api.ark import ArkClient
from ..adapters.api.base import NotFoundError
from ..adapters.base import WalletNotFoundError, WalletNotMultisigError
from ..core.logging import get_logger
from ..models import WalletInfo, parse_wire_wallet


@dataclass(slots=True)
class WalletInfoResolver:
    """
    Fetch a wallet's multisignature threshold and member keys, cached per address.

    Concurrent first resolutions of the same address may both hit the API; the
    results are identical, so whichever writes last wins. The lock only guards
    the cache dictionary itself.
    """

    client: ArkClient
    logger: LoggerAdapter = field(default_factory=lambda: get_logger(__name__), repr=False)
    _cache: Dict[str, WalletInfo] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def cached(self, address: str) -> Optional[WalletInfo]:
        with self._lock:
            return self._cache.get(address)

    def resolve(self, address: str) -> WalletInfo:
        """
        Return the :class:`WalletInfo` of ``address``.

        Raises
        ------
        WalletNotFoundError
            The address has no account.
        WalletNotMultisigError
            The account has no multisignature attribute.
        """

        existing = self.cached(address)
        if existing is not None:
            return existing

        try:
            raw = self.client.get_wallet(address)
        except NotFoundError as exc:
            raise WalletNotFoundError(f"Wallet {address} does not exist.", cause=exc) from exc
        wire = parse_wire_wallet(raw)
        if not wire.is_multisig:
            raise WalletNotMultisigError(f"Account with address {address} is not a multisig account.")

        info = WalletInfo(
            address=wire.address,
            multisig_threshold=wire.multisig_threshold or 1,
            multisig_member_public_keys=wire.multisig_public_keys or (),
        )
        with self._lock:
            self._cache[address] = info
        self.logger.info(
            "Resolved multisig wallet",
            extra={"wallet": address, "threshold": info.multisig_threshold, "members": len(info.multisig_member_public_keys)},
        )
        return info

    def invalidate(self, address: Optional[str] = None) -> None:
        """Drop the cached entry for ``address``, or every entry when omitted."""

        with self._lock:
            if address is None:
                self._cache.clear()
            else:
                self._cache.pop(address, None)
