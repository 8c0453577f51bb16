"""Rich console formatter for pricing reports."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from .generator import PricingReport


def _truncate_contract_id(contract_id: str) -> str:
    """Shorten ``principal.contract-name`` ids for display."""
    principal, _, name = contract_id.partition(".")
    if len(principal) > 12:
        principal = f"{principal[:5]}...{principal[-4:]}"
    return f"{principal}.{name}" if name else principal


def _format_usd(value: float | None) -> str:
    if value is None:
        return "—"
    if value >= 1:
        return f"${value:,.2f}"
    return f"${value:.6f}"


def _format_deviation(value: float | None, is_arbitrage: bool) -> str:
    if value is None:
        return "—"
    text = f"{value:+.2f}%"
    return f"[bold red]{text}[/]" if is_arbitrage else text


def format_report_table(report: PricingReport, console: Console | None = None) -> None:
    """Print a rich formatted pricing dashboard.

    Args:
        report: The pricing report to format
        console: Console to print to; defaults to stdout
    """
    console = console or Console()

    summary_table = Table(show_header=False, box=None, padding=(0, 1))
    summary_table.add_column("Key", style="dim")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("LP tokens priced", str(len(report.lp_tokens)))
    summary_table.add_row("Max level", str(report.max_level))
    summary_table.add_row("Unresolved", str(len(report.unresolved)))
    summary_table.add_row("Cycles", str(len(report.cycles)))
    summary_table.add_row("Arbitrage", str(len(report.arbitrage_opportunities)))
    summary_panel = Panel(summary_table, title="[bold]Summary[/]", border_style="green")

    levels_table = Table(show_header=False, box=None, padding=(0, 1))
    levels_table.add_column("Level", style="dim")
    levels_table.add_column("Count", style="cyan")
    for level, count in report.level_distribution.items():
        label = "cyclic" if level < 0 else f"level {level}"
        levels_table.add_row(label, str(count))
    levels_panel = Panel(levels_table, title="[bold]Levels[/]", border_style="blue")

    top_row = Columns([summary_panel, levels_panel], equal=True, expand=True)

    token_table = Table(expand=True, show_lines=False)
    token_table.add_column("LP Token", style="cyan", no_wrap=True)
    token_table.add_column("Lvl", justify="right", style="dim")
    token_table.add_column("Intrinsic", justify="right", style="yellow")
    token_table.add_column("Market", justify="right", style="yellow")
    token_table.add_column("Deviation", justify="right")
    token_table.add_column("Price", justify="right", style="green")
    token_table.add_column("Source", style="dim")
    token_table.add_column("Conf.", justify="right")

    for line in report.lp_tokens:
        result = line.result
        token_table.add_row(
            line.symbol,
            str(result.level),
            _format_usd(result.intrinsic_value),
            _format_usd(result.market_price),
            _format_deviation(result.price_deviation_pct, result.is_arbitrage_opportunity),
            _format_usd(result.usd_price),
            result.source.value,
            f"{result.confidence:.2f}",
        )

    parts: list[object] = [
        top_row,
        "",
        Panel(token_table, title="[bold]LP Token Prices[/]", border_style="cyan"),
    ]

    if report.unresolved:
        unresolved_table = Table(show_header=False, box=None, padding=(0, 1))
        unresolved_table.add_column("Token", style="red")
        unresolved_table.add_column("Reason", style="dim")
        for token_id, reason in report.unresolved.items():
            unresolved_table.add_row(_truncate_contract_id(token_id), reason)
        parts += [
            "",
            Panel(unresolved_table, title="[bold]Unresolved[/]", border_style="red"),
        ]

    console.print()
    console.print(
        Panel(
            Group(*parts),
            title="[bold white]LP Oracle[/]",
            border_style="white",
            padding=(1, 2),
        )
    )
    console.print()
