"""CLI entrypoint for the LP Oracle."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .logger import setup_logging
from .settings import CONFIG_ENV_VAR, OracleSettings, OutputFormat
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="LP token intrinsic pricing tool.",
)


def _cli_overrides(**options: Any) -> dict[str, Any]:
    """Settings passed on the command line; unset flags fall through to ENV/file."""
    overrides = {name: value for name, value in options.items() if value is not None}
    if "log_level" in overrides:
        overrides["log_level"] = overrides["log_level"].upper()
    return overrides


@app.callback(invoke_without_command=True)
def report(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [lp_oracle] table).",
        ),
    ] = None,
    vaults_file: Annotated[
        Path | None,
        typer.Option(
            "--vaults-file",
            help="JSON snapshot of the vault registry; takes precedence over --vaults-url.",
        ),
    ] = None,
    vaults_url: Annotated[
        str | None,
        typer.Option("--vaults-url", help="HTTP endpoint of the vault registry."),
    ] = None,
    prices_file: Annotated[
        Path | None,
        typer.Option("--prices-file", help="JSON map of contract id to USD price."),
    ] = None,
    prices_url: Annotated[
        str | None,
        typer.Option("--prices-url", help="HTTP endpoint returning USD prices."),
    ] = None,
    anchor_token: Annotated[
        str | None,
        typer.Option(
            "--anchor-token",
            help="Contract id of the token prices are also expressed against.",
        ),
    ] = None,
    arbitrage_threshold: Annotated[
        float | None,
        typer.Option(
            "--arbitrage-threshold",
            help="Market vs intrinsic deviation (%) flagged as arbitrage.",
        ),
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option(
            "--strict/--lenient",
            help="Fail the run when a price validation fails.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format (table or json)."),
    ] = None,
    global_timeout_seconds: Annotated[
        float | None,
        typer.Option(
            "--global-timeout-seconds",
            help="Abort the run after this many seconds (0 disables the timeout).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Price every LP token of the registry from its reserves.

    Loads configuration, fetches vaults and base prices, computes intrinsic
    values level by level and prints the report.
    """
    if config_path:
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    settings = OracleSettings(
        **_cli_overrides(
            vaults_file=vaults_file,
            vaults_url=vaults_url,
            prices_file=prices_file,
            prices_url=prices_url,
            anchor_token_id=anchor_token,
            arbitrage_threshold_pct=arbitrage_threshold,
            strict_price_validation=strict,
            output_format=output_format,
            global_timeout_seconds=global_timeout_seconds,
            log_level=log_level,
        )
    )

    setup_logging(settings.log_level)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if not settings.has_vault_source:
        raise typer.BadParameter(
            "a vault source is required.",
            param_hint=["--vaults-file", "--vaults-url", "LP_ORACLE_VAULTS_URL"],
        )

    from .pipeline.run import run_pricing

    asyncio.run(run_pricing(AppState.from_settings(settings)))


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
