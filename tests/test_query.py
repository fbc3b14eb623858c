from __future__ import annotations

import pytest

from ark_dex_adapter.adapters.api.query import build_query, render_order_by


def test_build_query_sorts_keys_and_skips_none():
    query = build_query({"senderId": "DAbc", "orderBy": ("timestamp", "asc"), "offset": 0, "limit": 2, "blockId": None})

    assert query == "?limit=2&offset=0&orderBy=timestamp:asc&senderId=DAbc"


def test_build_query_keeps_falsy_values_and_dotted_keys():
    assert build_query({"height.from": 0, "flag": False}) == "?flag=false&height.from=0"


def test_build_query_is_empty_without_values():
    assert build_query({}) == ""
    assert build_query({"senderId": None}) == ""


def test_build_query_escapes_reserved_characters():
    assert build_query({"vendorField": "a b&c"}) == "?vendorField=a%20b%26c"


def test_render_order_by_forms():
    assert render_order_by("desc") == "timestamp:desc"
    assert render_order_by("height:ASC") == "height:asc"
    assert render_order_by(("height", "desc")) == "height:desc"


def test_render_order_by_rejects_unknown_direction():
    with pytest.raises(ValueError):
        render_order_by("sideways")
    with pytest.raises(ValueError):
        build_query({"orderBy": ("timestamp", "up")})
