"""
Host-facing module wrapper.

The DEX host loads chain modules through a small lifecycle contract: it reads
``alias``, ``info``, ``dependencies``, ``events`` and ``actions``, calls
``load(channel)`` once and ``unload()`` on shutdown. Action handlers receive a
mapping with a ``params`` member using the host's camelCase names and return
plain JSON-compatible values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

import httpx

from . import __version__
from .config import AdapterConfig
from .core.context import AdapterContext
from .services.dex import DexAdapter
from .services.polling import CHAIN_CHANGES_EVENT, BlockPoller

MODULE_BOOTSTRAP_EVENT = "bootstrap"
MODULE_CHAIN_STATE_CHANGES_EVENT = CHAIN_CHANGES_EVENT
MODULE_NAME = "ark-dex-adapter"
MODULE_AUTHOR = "ARK DEX adapter maintainers"


class Channel(Protocol):
    """Pub-sub primitive provided by the host."""

    def invoke(self, action: str, params: Optional[Mapping[str, Any]] = None) -> Any: ...

    def publish(self, event: str, data: Optional[Mapping[str, Any]] = None) -> Any: ...


ActionHandler = Callable[[Optional[Mapping[str, Any]]], Any]


def _params(action: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not action:
        return {}
    params = action.get("params") or {}
    if not isinstance(params, Mapping):
        raise TypeError("Action 'params' must be a mapping.")
    return params


@dataclass(slots=True)
class ArkDexModule:
    """Chain module exposing the ARK adapter to the DEX host."""

    config: AdapterConfig
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)
    context: AdapterContext = field(init=False, repr=False)
    adapter: DexAdapter = field(init=False, repr=False)
    logger: LoggerAdapter = field(init=False, repr=False)
    channel: Optional[Channel] = field(default=None, init=False, repr=False)
    poller: Optional[BlockPoller] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.context = AdapterContext.build(self.config, transport=self.transport)
        self.adapter = DexAdapter(context=self.context)
        self.logger = self.context.get_logger(self.__class__.__name__)

    @property
    def alias(self) -> str:
        return self.config.alias

    @property
    def dependencies(self) -> List[str]:
        return ["app"]

    @property
    def info(self) -> Dict[str, str]:
        return {"author": MODULE_AUTHOR, "version": __version__, "name": MODULE_NAME}

    @property
    def events(self) -> List[str]:
        return [MODULE_BOOTSTRAP_EVENT, MODULE_CHAIN_STATE_CHANGES_EVENT]

    @property
    def actions(self) -> Dict[str, Dict[str, ActionHandler]]:
        adapter = self.adapter

        def serialize(items: List[Any]) -> List[Dict[str, Any]]:
            return [item.to_dict() for item in items]

        def outbound(action: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
            params = _params(action)
            return serialize(adapter.get_outbound_transactions(params["walletAddress"], params.get("fromTimestamp"), params.get("limit"), params.get("order") or "asc"))

        def inbound(action: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
            params = _params(action)
            return serialize(adapter.get_inbound_transactions(params["walletAddress"], params.get("fromTimestamp"), params.get("limit"), params.get("order") or "asc"))

        def inbound_from_block(action: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
            params = _params(action)
            return serialize(adapter.get_inbound_transactions_from_block(params["walletAddress"], params["blockId"]))

        def outbound_from_block(action: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
            params = _params(action)
            return serialize(adapter.get_outbound_transactions_from_block(params["walletAddress"], params["blockId"]))

        def blocks_between(action: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
            params = _params(action)
            limit = params.get("limit")
            if limit is None:
                limit = self.config.max_api_records
            return serialize(adapter.get_blocks_between_heights(params["fromHeight"], params["toHeight"], limit))

        handlers: Dict[str, ActionHandler] = {
            "getStatus": lambda action: adapter.get_status(),
            "getMultisigWalletMembers": lambda action: adapter.get_multisig_wallet_members(_params(action)["walletAddress"]),
            "getMinMultisigRequiredSignatures": lambda action: adapter.get_min_multisig_required_signatures(_params(action)["walletAddress"]),
            "getOutboundTransactions": outbound,
            "getInboundTransactions": inbound,
            "getInboundTransactionsFromBlock": inbound_from_block,
            "getOutboundTransactionsFromBlock": outbound_from_block,
            "getMaxBlockHeight": lambda action: adapter.get_max_block_height(),
            "getLastBlockAtTimestamp": lambda action: adapter.get_last_block_at_timestamp(_params(action)["timestamp"]).to_dict(),
            "getBlocksBetweenHeights": blocks_between,
            "getBlockAtHeight": lambda action: adapter.get_block_at_height(_params(action)["height"]).to_dict(),
            "postTransaction": lambda action: adapter.post_transaction(_params(action)["transaction"]),
        }
        return {name: {"handler": handler} for name, handler in handlers.items()}

    def _publish(self, event: str, payload: Dict[str, Any]) -> None:
        if self.channel is None:
            return
        self.channel.publish(f"{self.alias}:{event}", payload)

    def load(self, channel: Channel) -> None:
        """
        Validate config, resolve the DEX wallet and start polling for blocks.

        Raises :class:`AdapterConfigError` when no DEX wallet address is
        configured and :class:`InvalidActionError` when the wallet is missing or
        not a multisignature wallet.
        """

        self.config.require_wallet_address()
        self.adapter.dex_wallet_info()
        self.channel = channel

        channel.invoke("app:updateModuleState", {self.alias: {}})
        channel.publish(f"{self.alias}:{MODULE_BOOTSTRAP_EVENT}")

        self.poller = BlockPoller(
            adapter=self.adapter,
            publish=self._publish,
            interval=self.config.polling_interval,
            max_blocks_per_poll=self.config.max_blocks_per_poll,
        )
        self.poller.start()
        self.logger.info("Module loaded", extra={"wallet": self.config.dex_wallet_address})

    def unload(self) -> None:
        if self.poller is not None:
            self.poller.stop(timeout=self.config.timeout)
            self.poller = None
        self.channel = None
        self.logger.info("Module unloaded")
