"""
Background polling of the chain tip.

The poller runs on its own daemon thread and publishes ``addBlock`` events for
every block it has not published yet, in ascending height order. The last
published height is explicit state: a poll that finds no new height publishes
nothing, and a failed poll leaves the state untouched so the next poll resumes
from the same height.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Callable, Dict, List, Optional

from ..adapters.base import AdapterError, FetchCancelledError
from ..models import NormalizedBlock
from .dex import DexAdapter

CHAIN_CHANGES_EVENT = "chainChanges"

Publisher = Callable[[str, Dict[str, Any]], None]


def block_event(block: NormalizedBlock) -> Dict[str, Any]:
    return {"type": "addBlock", "block": {"timestamp": block.timestamp_ms, "height": block.height}}


@dataclass(slots=True)
class BlockPoller:
    """
    Cancellable scheduled task publishing new blocks.

    Parameters
    ----------
    adapter:
        Façade used to read the chain.
    publish:
        Callback receiving ``(event_name, payload)``.
    interval:
        Seconds between polls.
    max_blocks_per_poll:
        Upper bound on blocks published by a single poll; a larger backlog is
        drained over the following polls.
    """

    adapter: DexAdapter
    publish: Publisher
    interval: float
    max_blocks_per_poll: int = 100
    event_name: str = CHAIN_CHANGES_EVENT
    last_height: Optional[int] = None
    logger: LoggerAdapter = field(init=False, repr=False)
    _stop: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _thread: Optional[threading.Thread] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.adapter.context.get_logger(self.__class__.__name__)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> List[NormalizedBlock]:
        """
        Publish blocks above the last published height and return them.

        The first poll publishes only the current tip.
        """

        tip = self.adapter.get_max_block_height()
        if self.last_height is None:
            blocks = [self.adapter.get_block_at_height(tip)]
        elif tip <= self.last_height:
            return []
        else:
            blocks = self.adapter.get_blocks_between_heights(self.last_height, tip, self.max_blocks_per_poll, cancel_event=self._stop)

        published: List[NormalizedBlock] = []
        for block in sorted(blocks, key=lambda item: item.height):
            if self.last_height is not None and block.height <= self.last_height:
                continue
            self.publish(self.event_name, block_event(block))
            self.last_height = block.height
            published.append(block)
        if published:
            self.logger.debug("Published new blocks", extra={"height": self.last_height, "total": len(published)})
        return published

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except FetchCancelledError:
                break
            except AdapterError as exc:
                self.logger.warning("Block poll failed", extra={"error": str(exc), "kind": exc.kind, "height": self.last_height})
            except Exception:
                self.logger.exception("Block poll crashed", extra={"height": self.last_height})
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ark-dex-block-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to stop and wait for the thread to exit."""

        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
