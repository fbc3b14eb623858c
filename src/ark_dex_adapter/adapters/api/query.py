"""Query-string construction for the ARK search endpoints."""

from __future__ import annotations

from typing import Any, Mapping, Tuple, Union
from urllib.parse import quote

DEFAULT_ORDER_FIELD = "timestamp"
ORDER_DIRECTIONS = ("asc", "desc")

OrderBy = Union[str, Tuple[str, str]]


def render_order_by(value: OrderBy) -> str:
    """
    Render an ``orderBy`` value as ``<field>:<direction>``.

    A bare direction (``"asc"``/``"desc"``) applies to the ``timestamp`` field.
    """

    if isinstance(value, str):
        if ":" in value:
            field_name, direction = value.split(":", 1)
        else:
            field_name, direction = DEFAULT_ORDER_FIELD, value
    else:
        field_name, direction = value
    direction = direction.lower()
    if direction not in ORDER_DIRECTIONS:
        raise ValueError(f"Unsupported order direction '{direction}'.")
    return f"{field_name}:{direction}"


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_render_value(item) for item in value)
    return str(value)


def build_query(params: Mapping[str, Any]) -> str:
    """
    Build a ``?key=value&...`` query string.

    ``None`` values are skipped while ``0`` and ``False`` are kept. Keys are
    sorted so equal mappings always produce the same string. Returns an empty
    string when nothing remains.
    """

    parts: list[str] = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        rendered = render_order_by(value) if key == "orderBy" else _render_value(value)
        parts.append(f"{quote(str(key), safe='.')}={quote(rendered, safe=':,')}")
    if not parts:
        return ""
    return "?" + "&".join(parts)

