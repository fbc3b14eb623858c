"""
Configuration loading for the ARK DEX adapter.

Settings are read from a TOML document. The lookup order is:

1. Explicit ``path`` argument passed to :func:`load_config`.
2. ``ARK_DEX_CONFIG_PATH`` environment variable.
3. ``ark_dex.toml`` in the current working directory.

Values live under an ``[adapter]`` table. Individual ``ARK_DEX_*`` environment
variables (``ARK_DEX_WALLET_ADDRESS``, ``ARK_DEX_API_URL``, ``ARK_DEX_NETWORK``...)
override file values, and keyword overrides passed by the caller win over both.
A missing file is not an error: the defaults target the ARK mainnet public API.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .adapters.base import AdapterConfigError

DEFAULT_MODULE_ALIAS = "ark_dex_adapter"
DEFAULT_API_URLS = {
    "mainnet": "https://api.ark.io/api",
    "devnet": "https://dapi.ark.io/api",
}
DEFAULT_CONFIG_FILENAME = "ark_dex.toml"
_ENV_CONFIG_PATH = "ARK_DEX_CONFIG_PATH"
_ENV_PREFIX = "ARK_DEX_"
_ENV_ALIASES = {"WALLET_ADDRESS": "dex_wallet_address"}


@dataclass(frozen=True, slots=True)
class AdapterConfig:
    """
    Immutable adapter settings created once at startup.

    Attributes
    ----------
    alias:
        Module alias used to namespace events published to the host.
    dex_wallet_address:
        Address of the multisignature wallet operated by the DEX. Required for
        every action that maps transactions.
    network:
        ``mainnet`` or ``devnet``; selects the address version byte and the
        default API URL.
    api_url:
        Root of the ARK public REST API. Defaults to the network's public node.
    timeout:
        Per-request timeout in seconds.
    request_attempts:
        Attempts for idempotent GET requests that fail at the transport layer.
    polling_interval:
        Seconds between two polls of the chain tip.
    max_api_records:
        Page-size ceiling accepted by the API.
    max_transactions_per_block:
        Upper bound on records fetched for a single block.
    max_blocks_per_poll:
        Upper bound on blocks published by a single poll.
    """

    alias: str = DEFAULT_MODULE_ALIAS
    dex_wallet_address: Optional[str] = None
    network: str = "mainnet"
    api_url: Optional[str] = None
    timeout: float = 10.0
    request_attempts: int = 3
    polling_interval: float = 10.0
    max_api_records: int = 100
    max_transactions_per_block: int = 500
    max_blocks_per_poll: int = 100

    def __post_init__(self) -> None:
        if self.network not in DEFAULT_API_URLS:
            raise AdapterConfigError(f"Unsupported network '{self.network}'. Expected one of: {', '.join(sorted(DEFAULT_API_URLS))}.")
        for name in ("timeout", "polling_interval"):
            if getattr(self, name) <= 0:
                raise AdapterConfigError(f"'{name}' must be positive.")
        for name in ("request_attempts", "max_api_records", "max_transactions_per_block", "max_blocks_per_poll"):
            if getattr(self, name) < 1:
                raise AdapterConfigError(f"'{name}' must be at least 1.")

    @property
    def resolved_api_url(self) -> str:
        """API root with the network default applied and no trailing slash."""

        return (self.api_url or DEFAULT_API_URLS[self.network]).rstrip("/")

    def require_wallet_address(self) -> str:
        if not self.dex_wallet_address:
            raise AdapterConfigError("DEX wallet address not provided in the config.")
        return self.dex_wallet_address

    def with_overrides(self, **overrides: Any) -> "AdapterConfig":
        """Return a copy with the non-``None`` overrides applied."""

        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def _coerce(name: str, raw: Any) -> Any:
    field_types = {field.name: field.type for field in fields(AdapterConfig)}
    declared = field_types[name]
    try:
        if declared == "int":
            return int(raw)
        if declared == "float":
            return float(raw)
    except (TypeError, ValueError) as exc:
        raise AdapterConfigError(f"Invalid value for '{name}': {raw!r}") from exc
    return str(raw)


def _candidate_path(path: Optional[Path], environ: Mapping[str, str]) -> Optional[Path]:
    if path is not None:
        return path.expanduser()
    env_override = environ.get(_ENV_CONFIG_PATH)
    if env_override:
        return Path(env_override).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def _read_file_values(path: Path, *, strict: bool) -> Dict[str, Any]:
    if not path.is_file():
        if strict:
            raise AdapterConfigError(f"Config file '{path}' does not exist.")
        return {}
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise AdapterConfigError(f"Failed to parse config file '{path}': {exc}") from exc
    section = raw.get("adapter", {})
    if not isinstance(section, dict):
        raise AdapterConfigError(f"'[adapter]' in '{path}' must be a table.")
    return dict(section)


def _read_env_values(environ: Mapping[str, str]) -> Dict[str, Any]:
    known = {field.name for field in fields(AdapterConfig)}
    values: Dict[str, Any] = {}
    for key, raw in environ.items():
        if not key.startswith(_ENV_PREFIX) or key == _ENV_CONFIG_PATH:
            continue
        suffix = key[len(_ENV_PREFIX) :]
        name = _ENV_ALIASES.get(suffix, suffix.lower())
        if name in known and raw:
            values[name] = raw
    return values


def load_config(
    path: Optional[Path] = None,
    *,
    strict: bool = False,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> AdapterConfig:
    """
    Build an :class:`AdapterConfig` from file, environment and explicit overrides.

    Parameters
    ----------
    path:
        Optional TOML file. When omitted the environment and working directory
        are consulted.
    strict:
        Raise :class:`AdapterConfigError` if the selected file does not exist.
    environ:
        Environment mapping, defaults to :data:`os.environ`.
    overrides:
        Field values taking precedence over file and environment; ``None``
        values are ignored.
    """

    environ = os.environ if environ is None else environ
    candidate = _candidate_path(path, environ)
    values: Dict[str, Any] = _read_file_values(candidate, strict=strict or path is not None) if candidate else {}
    values.update(_read_env_values(environ))
    values.update({key: value for key, value in overrides.items() if value is not None})

    known = {field.name for field in fields(AdapterConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise AdapterConfigError(f"Unknown config keys: {', '.join(unknown)}")
    return AdapterConfig(**{name: _coerce(name, value) for name, value in values.items()})
