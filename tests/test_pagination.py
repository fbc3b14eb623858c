from __future__ import annotations

import threading

import pytest

from ark_dex_adapter.adapters.api.pagination import fetch_paginated
from ark_dex_adapter.adapters.base import FetchCancelledError, TransportError


class _Source:
    def __init__(self, total: int):
        self.records = list(range(total))
        self.calls: list[tuple[int, int]] = []

    def __call__(self, offset: int, limit: int):
        self.calls.append((offset, limit))
        return self.records[offset : offset + limit]


def test_pages_are_requested_until_max_total():
    source = _Source(10)

    result = fetch_paginated(source, max_total=5, max_page_size=2)

    assert result == [0, 1, 2, 3, 4]
    assert source.calls == [(0, 2), (2, 2), (4, 1)]


def test_short_page_ends_the_fetch():
    source = _Source(3)

    result = fetch_paginated(source, max_total=10, max_page_size=2)

    assert result == [0, 1, 2]
    assert source.calls == [(0, 2), (2, 2)]


def test_empty_first_page_returns_nothing():
    source = _Source(0)

    assert fetch_paginated(source, max_total=10, max_page_size=4) == []
    assert source.calls == [(0, 4)]


def test_non_positive_total_issues_no_request():
    source = _Source(5)

    assert fetch_paginated(source, max_total=0, max_page_size=2) == []
    assert fetch_paginated(source, max_total=-3, max_page_size=2) == []
    assert source.calls == []


def test_oversized_page_is_truncated():
    result = fetch_paginated(lambda offset, limit: list(range(10)), max_total=3, max_page_size=5)

    assert result == [0, 1, 2]


def test_cancel_event_stops_between_pages():
    source = _Source(10)
    cancel = threading.Event()

    def fetch(offset: int, limit: int):
        cancel.set()
        return source(offset, limit)

    with pytest.raises(FetchCancelledError):
        fetch_paginated(fetch, max_total=10, max_page_size=2, cancel_event=cancel)
    assert source.calls == [(0, 2)]


def test_page_errors_propagate():
    def fetch(offset: int, limit: int):
        if offset:
            raise TransportError("connection reset")
        return [1, 2]

    with pytest.raises(TransportError):
        fetch_paginated(fetch, max_total=10, max_page_size=2)


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        fetch_paginated(lambda offset, limit: [], max_total=1, max_page_size=0)
