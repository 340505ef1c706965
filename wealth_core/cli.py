from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from wealth_core.domain.models import CATEGORY_LABELS, AllocationTargets, AppConfig
from wealth_core.io import config as config_io
from wealth_core.io import export as export_io
from wealth_core.io import ledger as ledger_io
from wealth_core.io.document import MalformedDocumentError, build_record
from wealth_core.services import aggregation, returns, targets
from wealth_core.services.ledger_store import LedgerStore

app = typer.Typer(help="Personal wealth ledger: distribution, targets and returns.")
console = Console()
logger = logging.getLogger(__name__)


def _config(ctx: typer.Context) -> AppConfig:
    return ctx.obj["config"]


def _open_store(ctx: typer.Context, persist: bool = False) -> LedgerStore:
    path = _config(ctx).data_path
    logger.debug("using ledger %s", path)
    try:
        store = ledger_io.load_store(path)
    except (MalformedDocumentError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Cannot read ledger {path}: {exc}") from exc
    if persist:
        store.subscribe(lambda snap: ledger_io.save_ledger(path, snap))
    return store


def _parse_wallets(pairs: List[str]) -> dict:
    wallets = {}
    for pair in pairs:
        name, sep, amount = pair.partition("=")
        if not sep:
            raise typer.BadParameter(f"Wallet must look like name=amount, got {pair!r}")
        try:
            wallets[name.strip()] = float(amount)
        except ValueError as exc:
            raise typer.BadParameter(f"Wallet amount for {name!r} is not a number") from exc
    return wallets


def _money(value: float) -> str:
    return f"{value:,.2f}"


@app.callback()
def main(
    ctx: typer.Context,
    data: Optional[Path] = typer.Option(None, help="Ledger JSON document (defaults to config/env)"),
    config: Optional[Path] = typer.Option(None, help="Settings JSON"),
    log_level: Optional[str] = typer.Option(None, help="Logging level, e.g. INFO or DEBUG"),
):
    cfg = config_io.load_app_config(config)
    if data is not None:
        cfg = dataclasses.replace(cfg, data_path=data)
    if log_level:
        cfg = dataclasses.replace(cfg, log_level=log_level.upper())
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"config": cfg}


@app.command()
def summary(
    ctx: typer.Context,
    month: Optional[str] = typer.Option(None, help="Month label (defaults to the selected month)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
):
    """Totals, flows and return for one month."""
    snap = _open_store(ctx).snapshot()
    result = returns.month_summary(snap, month)
    annualized = returns.annualized_return(snap)
    if as_json:
        payload = dataclasses.asdict(result)
        payload["annualized_return"] = round(annualized, 2)
        typer.echo(json.dumps(payload, indent=2))
        return
    console.print(f"[bold cyan]{result.label}[/bold cyan]")
    console.print(f"Total wealth: [bold]{_money(result.total)}[/bold]")
    console.print(f"Income: {_money(result.income)} | Expenses: {_money(result.expenses)}")
    colour = "green" if result.savings >= 0 else "red"
    console.print(f"Net savings: [{colour}]{_money(result.savings)}[/{colour}]")
    console.print(f"Month-over-month: {result.return_pct:.2f}% | Annualized: {annualized:.2f}%")


@app.command()
def distribution(
    ctx: typer.Context,
    month: Optional[str] = typer.Option(None, help="Month label (defaults to the selected month)"),
):
    """Category and wallet breakdown for one month."""
    snap = _open_store(ctx).snapshot()
    record = aggregation.find_record(snap, month or snap.selected_label)
    dist = aggregation.distribution(record)
    pct = aggregation.percentage_breakdown(dist)

    table = Table(title=f"Distribution {record.label if record else month or snap.selected_label}")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("%", justify="right")
    for category, amount in dist.as_dict().items():
        table.add_row(CATEGORY_LABELS[category], _money(amount), f"{pct.get(category):.1f}")
    for wallet, amount in dist.crypto_wallets.items():
        table.add_row(f"  {wallet}", _money(amount), f"{pct.crypto_wallets.get(wallet, 0.0):.1f}")
    console.print(table)
    console.print(f"Total: [bold]{_money(dist.total)}[/bold]")


@app.command("targets")
def show_targets(ctx: typer.Context):
    """Deviation from allocation targets and recommendations."""
    snap = _open_store(ctx).snapshot()
    devs = targets.deviations(snap)

    table = Table(title=f"Targets for {snap.selected_label}")
    for name in ("Category", "Actual %", "Target %", "Deviation", "Status"):
        table.add_column(name)
    colours = {"ok": "green", "warning": "yellow", "alert": "red"}
    for dev in devs.values():
        colour = colours[dev.severity]
        table.add_row(
            CATEGORY_LABELS[dev.category],
            f"{dev.actual:.1f}",
            f"{dev.target:.1f}",
            f"[{colour}]{dev.deviation:+.1f}[/{colour}]",
            dev.status.replace("_", " "),
        )
    console.print(table)

    counts = targets.deviation_counts(devs)
    console.print(
        f"On target: {counts['on_target']} | Over: {counts['over_target']} | Under: {counts['under_target']}"
    )
    if snap.targets.total != 100:
        console.print(f"[yellow]Targets add up to {snap.targets.total:.1f}%, not 100%.[/yellow]")
    for tip in targets.recommendations(devs):
        console.print(f"- {tip}")


@app.command("set-targets")
def set_targets(
    ctx: typer.Context,
    cash: float = typer.Option(..., help="Target % for cash"),
    interest_bearing: float = typer.Option(..., help="Target % for brokerage/interest-bearing accounts"),
    crypto: float = typer.Option(..., help="Target % for crypto"),
    index_funds: float = typer.Option(..., help="Target % for index funds"),
):
    """Replace all allocation targets."""
    store = _open_store(ctx, persist=True)
    store.set_targets(
        AllocationTargets(cash=cash, interest_bearing=interest_bearing, crypto=crypto, index_funds=index_funds)
    )
    typer.echo(f"Targets saved to {_config(ctx).data_path}")


@app.command()
def upsert(
    ctx: typer.Context,
    month: str = typer.Option(..., help="Month label, e.g. Jan or 2024-01"),
    income: float = typer.Option(0.0, help="Income for the month"),
    expenses: float = typer.Option(0.0, help="Expenses for the month"),
    cash: float = typer.Option(0.0, help="Cash balance"),
    brokerage_a: float = typer.Option(0.0, help="First brokerage balance"),
    brokerage_b: float = typer.Option(0.0, help="Second brokerage balance"),
    index_funds: float = typer.Option(0.0, help="Index funds balance"),
    other_cash: float = typer.Option(0.0, help="Other cash balance"),
    wallet: Optional[List[str]] = typer.Option(None, help="Crypto wallet balance as name=amount (repeatable)"),
    select: bool = typer.Option(False, help="Also select this month"),
):
    """Add a month or replace the month with the same label."""
    record = build_record(
        month,
        income=income,
        expenses=expenses,
        cash_balance=cash,
        brokerage_balance_a=brokerage_a,
        brokerage_balance_b=brokerage_b,
        index_funds_balance=index_funds,
        other_cash_balance=other_cash,
        crypto_holdings=_parse_wallets(wallet or []),
    )
    store = _open_store(ctx, persist=True)
    store.upsert_month(record)
    if select:
        store.select_month(month)
    typer.echo(f"Month {month} saved ({_money(aggregation.total_wealth(record))})")


@app.command()
def select(ctx: typer.Context, month: str = typer.Argument(..., help="Month label to select")):
    """Point the selection at a month."""
    store = _open_store(ctx, persist=True)
    store.select_month(month)
    if store.find(month) is None:
        console.print(f"[yellow]No record for {month}; derived values will be zero.[/yellow]")
    typer.echo(f"Selected {store.selected_label}")


@app.command("returns")
def show_returns(
    ctx: typer.Context,
    month: Optional[str] = typer.Option(None, help="Month label (defaults to the selected month)"),
):
    """Month-over-month and annualized return."""
    snap = _open_store(ctx).snapshot()
    label = month or snap.selected_label
    console.print(f"{label}: {returns.month_over_month_return(snap, label):.2f}% vs previous month")
    console.print(f"Annualized over history: {returns.annualized_return(snap):.2f}%")


@app.command()
def evolution(
    ctx: typer.Context,
    window: Optional[int] = typer.Option(None, help="Trailing number of months (default: all)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
):
    """Chronological total-wealth series."""
    snap = _open_store(ctx).snapshot()
    window = window if window is not None else _config(ctx).evolution_window
    series = returns.evolution_series(snap, window)
    if as_json:
        typer.echo(json.dumps([[p.label, p.total] for p in series], indent=2))
        return
    table = Table(title="Evolution")
    table.add_column("Month")
    table.add_column("Total", justify="right")
    for point in series:
        table.add_row(point.label, _money(point.total))
    console.print(table)


@app.command()
def export(
    ctx: typer.Context,
    out: Path = typer.Option(..., help="CSV destination"),
    window: Optional[int] = typer.Option(None, help="Trailing number of months (default: all)"),
):
    """Dump the history table to CSV."""
    snap = _open_store(ctx).snapshot()
    path = export_io.export_csv(snap, out, window)
    typer.echo(f"History written to {path}")


@app.command()
def compare(
    ctx: typer.Context,
    first: str = typer.Argument(..., help="Earlier month label"),
    second: str = typer.Argument(..., help="Later month label"),
):
    """Compare totals and income between two months."""
    snap = _open_store(ctx).snapshot()
    result = returns.compare_months(snap, first, second)
    if result is None:
        console.print("[yellow]Both months must exist in the ledger.[/yellow]")
        raise typer.Exit(code=1)
    console.print(
        f"{result.first} -> {result.second}: total {_money(result.total_change)} "
        f"({result.pct_change:+.2f}%), income {_money(result.income_change)}"
    )


if __name__ == "__main__":
    app()
