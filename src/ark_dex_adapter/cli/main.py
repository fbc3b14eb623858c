"""
Typer application exposing the adapter actions from a terminal.

Every command prints JSON on stdout. Adapter failures are reported on stderr
with the error kind and exit with status 1.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from ..adapters.base import AdapterError
from ..config import load_config
from ..core.context import AdapterContext
from ..core.logging import configure_logging
from ..services.dex import DexAdapter

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Inspect an ARK multisignature DEX wallet.\n\n"
        "Commands query wallets, transfers and blocks through the ARK public REST API and\n"
        "broadcast signed multisignature transfers."
    ),
)


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML config file with an [adapter] table.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Override the ARK API root URL."),
    wallet: Optional[str] = typer.Option(None, "--wallet", "-w", help="Address of the DEX multisignature wallet."),
    network: Optional[str] = typer.Option(None, "--network", "-n", help="ARK network: mainnet or devnet."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level, e.g. DEBUG."),
) -> None:
    """
    Resolve the configuration and build the adapter.

    The adapter is stored in Typer's state so commands can retrieve it via
    :class:`typer.Context`.
    """

    configure_logging(log_level)
    try:
        config = load_config(config_file, api_url=api_url, dex_wallet_address=wallet, network=network)
    except AdapterError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    state = ctx.ensure_object(dict)
    state["adapter"] = DexAdapter(context=AdapterContext.build(config))


def _require_adapter(ctx: typer.Context) -> DexAdapter:
    state = ctx.ensure_object(dict)
    adapter = state.get("adapter")
    if not isinstance(adapter, DexAdapter):
        raise typer.Exit(code=2)
    return adapter


def _emit(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _fail(exc: AdapterError) -> typer.Exit:
    label = exc.kind or exc.__class__.__name__
    typer.echo(f"{label}: {exc.message}", err=True)
    return typer.Exit(code=1)


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Print the adapter version."""

    _emit(_require_adapter(ctx).get_status())


@app.command("members")
def members(ctx: typer.Context, wallet_address: str = typer.Argument(..., help="Multisignature wallet address.")) -> None:
    """List member addresses of a multisignature wallet."""

    adapter = _require_adapter(ctx)
    try:
        _emit(adapter.get_multisig_wallet_members(wallet_address))
    except AdapterError as exc:
        raise _fail(exc) from exc


@app.command("min-signatures")
def min_signatures(ctx: typer.Context, wallet_address: str = typer.Argument(..., help="Multisignature wallet address.")) -> None:
    """Print the signature threshold of a multisignature wallet."""

    adapter = _require_adapter(ctx)
    try:
        _emit(adapter.get_min_multisig_required_signatures(wallet_address))
    except AdapterError as exc:
        raise _fail(exc) from exc


def _transactions_command(ctx: typer.Context, direction: str, wallet_address: str, from_timestamp: Optional[int], limit: Optional[int], order: str) -> None:
    adapter = _require_adapter(ctx)
    fetch = adapter.get_outbound_transactions if direction == "outbound" else adapter.get_inbound_transactions
    try:
        transactions = fetch(wallet_address, from_timestamp, limit, order)
    except AdapterError as exc:
        raise _fail(exc) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit([txn.to_dict() for txn in transactions])


@app.command("outbound")
def outbound(
    ctx: typer.Context,
    wallet_address: str = typer.Argument(..., help="Sender address."),
    from_timestamp: Optional[int] = typer.Option(None, "--from", help="Timestamp bound in milliseconds since the Unix epoch."),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum number of transactions."),
    order: str = typer.Option("asc", "--order", help="asc or desc."),
) -> None:
    """List transfers sent by a wallet."""

    _transactions_command(ctx, "outbound", wallet_address, from_timestamp, limit, order)


@app.command("inbound")
def inbound(
    ctx: typer.Context,
    wallet_address: str = typer.Argument(..., help="Recipient address."),
    from_timestamp: Optional[int] = typer.Option(None, "--from", help="Timestamp bound in milliseconds since the Unix epoch."),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum number of transactions."),
    order: str = typer.Option("asc", "--order", help="asc or desc."),
) -> None:
    """List transfers received by a wallet."""

    _transactions_command(ctx, "inbound", wallet_address, from_timestamp, limit, order)


@app.command("block-inbound")
def block_inbound(ctx: typer.Context, wallet_address: str = typer.Argument(...), block_id: str = typer.Argument(...)) -> None:
    """List transfers received by a wallet within one block."""

    adapter = _require_adapter(ctx)
    try:
        _emit([txn.to_dict() for txn in adapter.get_inbound_transactions_from_block(wallet_address, block_id)])
    except AdapterError as exc:
        raise _fail(exc) from exc


@app.command("block-outbound")
def block_outbound(ctx: typer.Context, wallet_address: str = typer.Argument(...), block_id: str = typer.Argument(...)) -> None:
    """List transfers sent by a wallet within one block."""

    adapter = _require_adapter(ctx)
    try:
        _emit([txn.to_dict() for txn in adapter.get_outbound_transactions_from_block(wallet_address, block_id)])
    except AdapterError as exc:
        raise _fail(exc) from exc


@app.command("max-height")
def max_height(ctx: typer.Context) -> None:
    """Print the current chain height."""

    adapter = _require_adapter(ctx)
    try:
        _emit(adapter.get_max_block_height())
    except AdapterError as exc:
        raise _fail(exc) from exc


@app.command("blocks")
def blocks(
    ctx: typer.Context,
    from_height: int = typer.Argument(..., help="Exclusive lower height."),
    to_height: int = typer.Argument(..., help="Inclusive upper height."),
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of blocks."),
) -> None:
    """List blocks in a height range."""

    adapter = _require_adapter(ctx)
    try:
        _emit([block.to_dict() for block in adapter.get_blocks_between_heights(from_height, to_height, limit)])
    except AdapterError as exc:
        raise _fail(exc) from exc


@app.command("block")
def block(ctx: typer.Context, height: int = typer.Argument(..., help="Block height.")) -> None:
    """Show the block at a height."""

    adapter = _require_adapter(ctx)
    try:
        _emit(adapter.get_block_at_height(height).to_dict())
    except AdapterError as exc:
        raise _fail(exc) from exc


@app.command("last-block")
def last_block(ctx: typer.Context, timestamp: int = typer.Argument(..., help="Milliseconds since the Unix epoch.")) -> None:
    """Show the newest block forged at or before a timestamp."""

    adapter = _require_adapter(ctx)
    try:
        _emit(adapter.get_last_block_at_timestamp(timestamp).to_dict())
    except AdapterError as exc:
        raise _fail(exc) from exc


@app.command("post")
def post(
    ctx: typer.Context,
    transaction_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON file holding a signed transaction."),
) -> None:
    """Broadcast a signed multisignature transfer."""

    adapter = _require_adapter(ctx)
    try:
        payload = json.loads(transaction_file.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Failed to read transaction file '{transaction_file}': {exc}") from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter("Transaction file must contain a JSON object.")
    try:
        adapter.post_transaction(payload)
    except AdapterError as exc:
        raise _fail(exc) from exc
    _emit({"status": "accepted", "id": payload.get("id")})
