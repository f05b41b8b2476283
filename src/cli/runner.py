# src/cli/runner.py

"""Headless conversion runner and currency listing."""

import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.models.errors import FxError, InvalidAmountError
from src.models.rate_snapshot import RateSnapshot
from src.services.converter import (
    ConversionResult,
    build_conversion,
    validate_amount,
)
from src.services.formatting import format_amount
from src.services.rate_refresher import (
    RateRefresher,
    RefreshOutcome,
    RefreshResult,
)
from src.storage.rate_store import RateStore

logger = logging.getLogger("fx_convert.cli")

# Stderr console for status messages so stdout stays clean for results
_err = Console(stderr=True)


def render_conversion(result: ConversionResult) -> list[str]:
    """Build the human-readable result lines for a conversion."""
    lines = [
        "Conversion Result:",
        f"{result.source} {format_amount(result.amount, result.source)}"
        f" = {result.target} {format_amount(result.converted, result.target)}",
        f"Exchange Rate: 1 {result.source}"
        f" = {format_amount(result.rate, result.target)} {result.target}",
    ]
    if result.base_equivalent is not None:
        value = format_amount(result.base_equivalent, result.base)
        if result.base == "USD":
            value = f"${value}"
        else:
            value = f"{value} {result.base}"
        lines.append(f"{result.base} Equivalent: {value}")
    return lines


def describe_refresh(result: RefreshResult) -> str:
    """One-line status describing where the rates came from."""
    if result.outcome is RefreshOutcome.DEFAULTS:
        return "[yellow]No API key found, using default rates[/yellow]"
    if result.outcome is RefreshOutcome.STALE:
        return (
            "[yellow]Could not refresh rates "
            f"({escape(result.reason)}), using cached data[/yellow]"
        )
    if result.outcome is RefreshOutcome.REFRESHED:
        return "[green]Fetched fresh rates[/green]"
    return "[dim]Using cached rates[/dim]"


def _build_refresher(rates_file: str | None) -> RateRefresher:
    store = RateStore(Path(rates_file)) if rates_file else RateStore()
    return RateRefresher(store=store)


def cli_convert(
    amount_text: str,
    source: str,
    target: str,
    rates_file: str | None = None,
) -> int:
    """Convert once and print the result; return an exit code (0=ok, 1=fail)."""
    try:
        amount = validate_amount(amount_text)
    except InvalidAmountError as exc:
        _err.print(f"[red]Invalid amount: {escape(str(exc))}[/red]")
        return 1

    source = source.strip().upper()
    target = target.strip().upper()

    refresher = _build_refresher(rates_file)
    try:
        refresh = refresher.refresh()
        _err.print(describe_refresh(refresh))
        result = build_conversion(amount, source, target, refresh.snapshot)
    except FxError as exc:
        logger.error("Conversion failed: %s", exc, exc_info=True)
        _err.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1
    finally:
        refresher.close()

    logger.info(
        "Converted %s %s to %s %s",
        amount,
        source,
        result.converted,
        target,
    )
    console = Console()
    for line in render_conversion(result):
        console.print(line, highlight=False)
    return 0


def _print_currency_table(snapshot: RateSnapshot) -> None:
    """Render a Rich table of codes and their rate against the base."""
    table = Table(
        title=f"Available Currencies (base {snapshot.base})",
        title_style="bold cyan",
    )
    table.add_column("Code", style="bold")
    table.add_column(f"Per 1 {snapshot.base}", justify="right", style="green")

    table.add_row(snapshot.base, "1")
    for code in sorted(snapshot.rates):
        table.add_row(code, format_amount(snapshot.rates[code], code))

    Console().print(table)


def run_list_currencies(rates_file: str | None = None) -> int:
    """Print every currency the current snapshot can convert."""
    refresher = _build_refresher(rates_file)
    try:
        refresh = refresher.refresh()
    except FxError as exc:
        logger.error("Listing currencies failed: %s", exc, exc_info=True)
        _err.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1
    finally:
        refresher.close()

    _err.print(describe_refresh(refresh))
    _print_currency_table(refresh.snapshot)
    return 0
