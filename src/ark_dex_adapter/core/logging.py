"""
Structured logging helpers for the ARK DEX adapter.

Every module obtains its logger through :func:`get_logger` so that records share
one formatter: the usual ``time | level | name | message`` prefix followed by the
structured ``extra`` payload rendered as ``key=value`` pairs. Chain-specific keys
(action, wallet, height, offset, limit) are printed first so that pagination and
polling traces stay readable.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from copy import copy
from logging import Logger, LoggerAdapter
from typing import Any, Iterable, Mapping, MutableMapping, Optional, Sequence

DEFAULT_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = "INFO"
_ENV_LEVEL = "ARK_DEX_LOG_LEVEL"
_ENV_COLOR = "ARK_DEX_LOG_COLOR"
_EXTRA_FOCUS_ORDER: Sequence[str] = (
    "action",
    "status",
    "wallet",
    "block_id",
    "height",
    "offset",
    "limit",
    "received",
    "total",
    "method",
    "url",
    "status_code",
    "tags",
)

_LEVEL_STYLES = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[95m",
}
_RESET = "\033[0m"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

_configured = False


def _resolve_level(level: Optional[int | str]) -> int:
    if isinstance(level, int):
        return level
    candidate = (level or os.getenv(_ENV_LEVEL) or DEFAULT_LEVEL).upper()
    resolved = logging.getLevelName(candidate)
    return resolved if isinstance(resolved, int) else logging.INFO


def _color_enabled(stream: Any) -> bool:
    preference = (os.getenv(_ENV_COLOR) or "auto").strip().lower()
    if preference in {"1", "true", "yes", "on"}:
        return True
    if preference in {"0", "false", "no", "off"}:
        return False
    return hasattr(stream, "isatty") and bool(stream.isatty())


def _ordered_extras(record: logging.LogRecord) -> Iterable[tuple[str, Any]]:
    payload = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS and not key.startswith("_") and value is not None}
    for key in _EXTRA_FOCUS_ORDER:
        if key in payload:
            yield key, payload.pop(key)
    for key in sorted(payload):
        yield key, payload[key]


def _render_extra(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        return "[" + ", ".join(_render_extra(item) for item in value) + "]"
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields and optionally colours the level name."""

    def __init__(self, *, use_color: bool = False) -> None:
        super().__init__(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        working = copy(record)
        if self.use_color:
            style = _LEVEL_STYLES.get(working.levelname.upper())
            if style:
                working.levelname = f"{style}{working.levelname}{_RESET}"
        base = super().format(working)
        extras = " ".join(f"{key}={_render_extra(value)}" for key, value in _ordered_extras(record))
        return f"{base} | {extras}" if extras else base


class ContextLoggerAdapter(LoggerAdapter):
    """Adapter that merges its bound context with the ``extra`` given at the call site."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        merged: MutableMapping[str, object] = dict(self.extra or {})
        call_extra = kwargs.get("extra")
        if call_extra:
            merged.update(call_extra)
        kwargs["extra"] = merged
        return msg, kwargs


def configure_logging(level: Optional[int | str] = None, *, force: bool = False) -> None:
    """
    Install the structured handler on the root logger.

    Parameters
    ----------
    level:
        Optional level override. Falls back to ``ARK_DEX_LOG_LEVEL`` or ``INFO``.
    force:
        Reapply the configuration even when it was already installed.
    """

    global _configured
    if _configured and not force:
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(_resolve_level(level))
    handler.setFormatter(StructuredLogFormatter(use_color=_color_enabled(handler.stream)))
    logging.basicConfig(level=_resolve_level(level), handlers=[handler], force=force)
    _configured = True


def get_logger(
    name: str,
    *,
    level: Optional[int | str] = None,
    tags: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, object]] = None,
) -> LoggerAdapter:
    """Return a :class:`logging.LoggerAdapter` carrying ``tags`` and ``extra`` on every record."""

    configure_logging(level)
    base: Logger = logging.getLogger(name)
    if level is not None:
        base.setLevel(_resolve_level(level))
    payload: MutableMapping[str, object] = {}
    if tags:
        payload["tags"] = tuple(tags)
    if extra:
        payload.update({key: value for key, value in extra.items() if value is not None})
    return ContextLoggerAdapter(base, payload)


def bind_context(logger: LoggerAdapter, **context: object) -> LoggerAdapter:
    """Return a child adapter with additional bound fields; the original adapter is left untouched."""

    current = dict(logger.extra) if isinstance(logger.extra, Mapping) else {}
    current.update({key: value for key, value in context.items() if value is not None})
    return ContextLoggerAdapter(logger.logger, current)


def log_progress(
    logger: LoggerAdapter | Logger,
    message: str,
    *,
    action: Optional[str] = None,
    status: Optional[str] = None,
    level: int = logging.INFO,
    extra: Optional[Mapping[str, object]] = None,
) -> None:
    """Emit a record tagged with the adapter action and its status."""

    payload: MutableMapping[str, object] = {}
    if isinstance(logger, LoggerAdapter) and isinstance(logger.extra, Mapping):
        payload.update({key: value for key, value in logger.extra.items() if value is not None})
    if extra:
        payload.update(extra)
    if action:
        payload["action"] = action
    if status:
        payload["status"] = status
    target = logger.logger if isinstance(logger, LoggerAdapter) else logger
    target.log(level, message, extra=dict(payload) if payload else None)
