"""
Sequential offset pagination over the ARK search endpoints.

The ARK API caps the page size, so larger result sets are assembled from
several requests. Pages are fetched strictly one after the other because each
cursor depends on how many records the previous page returned.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Callable, List, Optional, Sequence

from ...core.logging import get_logger
from ..base import FetchCancelledError

PageFetcher = Callable[[int, int], Sequence[Any]]

_LOGGER = get_logger(__name__)


@dataclass(slots=True)
class PageState:
    """Cursor state of one paginated fetch."""

    offset: int = 0
    remaining: int = 0
    accumulated: List[Any] = field(default_factory=list)

    def next_limit(self, max_page_size: int) -> int:
        return min(self.remaining, max_page_size)

    def advance(self, records: Sequence[Any]) -> None:
        self.accumulated.extend(records)
        self.offset += len(records)
        self.remaining -= len(records)


def fetch_paginated(
    fetch_page: PageFetcher,
    *,
    max_total: int,
    max_page_size: int,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[LoggerAdapter] = None,
) -> List[Any]:
    """
    Collect up to ``max_total`` records by calling ``fetch_page(offset, limit)``.

    The loop stops when a page comes back empty, when a page is shorter than
    requested, or once ``max_total`` records are accumulated. Every ``limit``
    passed to ``fetch_page`` is at least 1. Exceptions raised by ``fetch_page``
    propagate and the partial result is dropped.

    Parameters
    ----------
    fetch_page:
        Callable issuing one request and returning its records.
    max_total:
        Maximum number of records to return.
    max_page_size:
        Page-size ceiling accepted by the API.
    cancel_event:
        Optional event checked before each page; raises
        :class:`FetchCancelledError` once set.
    """

    if max_page_size < 1:
        raise ValueError("max_page_size must be at least 1.")
    log = logger or _LOGGER
    state = PageState(remaining=max(0, max_total))

    while state.remaining > 0:
        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelledError(f"Paginated fetch cancelled after {len(state.accumulated)} records.")
        limit = state.next_limit(max_page_size)
        records = list(fetch_page(state.offset, limit))
        log.debug("Fetched page", extra={"offset": state.offset, "limit": limit, "received": len(records)})
        if len(records) > limit:
            records = records[:limit]
        state.advance(records)
        if len(records) < limit:
            break

    log.debug("Pagination finished", extra={"total": len(state.accumulated)})
    return state.accumulated
