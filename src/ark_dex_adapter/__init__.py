"""
ARK blockchain adapter for a multisignature DEX.

The adapter reads transfers and blocks from the ARK public REST API, normalizes
them to the chain-agnostic shape the DEX expects and broadcasts multisignature
transfers prepared by the DEX members. :class:`ArkDexModule` is the host-facing
entry point; :class:`DexAdapter` exposes the same operations to Python callers.
"""

__version__ = "0.1.0"

from .adapters.base import AdapterError, InvalidActionError, TransportError
from .config import AdapterConfig, load_config
from .models import NormalizedBlock, NormalizedTransaction, SignaturePacket, WalletInfo
from .module import ArkDexModule
from .services.dex import DexAdapter

__all__ = [
    "__version__",
    "AdapterConfig",
    "AdapterError",
    "ArkDexModule",
    "DexAdapter",
    "InvalidActionError",
    "NormalizedBlock",
    "NormalizedTransaction",
    "SignaturePacket",
    "TransportError",
    "WalletInfo",
    "load_config",
]
