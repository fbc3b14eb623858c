"""Service layer composing the API client into DEX operations."""

from .dex import DexAdapter
from .polling import BlockPoller
from .wallet import WalletInfoResolver

__all__ = ["BlockPoller", "DexAdapter", "WalletInfoResolver"]
