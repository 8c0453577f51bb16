import json
from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console

from lp_oracle.domain import IntrinsicResult, PriceSource, UnderlyingValue
from lp_oracle.report.formatter import (
    _format_deviation,
    _format_usd,
    _truncate_contract_id,
    format_report_table,
)
from lp_oracle.report.generator import LpTokenLine, PricingReport
from lp_oracle.report.publisher import publish_report, publish_to_stdout
from lp_oracle.settings import OracleSettings, OutputFormat


@pytest.fixture
def sample_report() -> PricingReport:
    """Provides a sample PricingReport for testing."""
    result = IntrinsicResult(
        token_id="SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9.pool-stx-usdc",
        usd_price=2.1,
        sbtc_ratio=0.000042,
        confidence=0.95,
        level=0,
        dependencies=(),
        source=PriceSource.HYBRID,
        intrinsic_value=2.0,
        pool_value_usd=4.0,
        per_token=True,
        breakdown=(
            UnderlyingValue("SP1.wstx", "STX", 4.0, 2.0),
            UnderlyingValue("SP1.usdc", "USDC", 2.0, 2.0),
        ),
        market_price=2.3,
        price_deviation_pct=15.0,
        is_arbitrage_opportunity=True,
    )
    return PricingReport(
        lp_tokens=[LpTokenLine(symbol="STX-USDC LP", result=result)],
        level_distribution={-1: 2, 0: 1},
        cycles=[["SP1.a", "SP1.b", "SP1.a"]],
        unresolved={
            "SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9.pool-alex": "no usable price for SP1.alex"
        },
        base_prices={"SP1.wstx": 0.5},
    )


@pytest.mark.asyncio
async def test_publish_to_stdout_prints_json(capsys, sample_report: PricingReport):
    await publish_to_stdout(sample_report, OutputFormat.JSON)

    captured = capsys.readouterr()
    assert captured.err == ""
    assert json.loads(captured.out) == json.loads(json.dumps(sample_report.to_dict()))


@pytest.mark.asyncio
async def test_publish_to_stdout_prints_table_by_default(
    capsys, sample_report: PricingReport
):
    await publish_to_stdout(sample_report)

    captured = capsys.readouterr()
    assert "LP Oracle" in captured.out
    assert "Summary" in captured.out
    with pytest.raises(json.JSONDecodeError):
        json.loads(captured.out)


@pytest.mark.asyncio
async def test_publish_report_uses_configured_format(sample_report: PricingReport):
    config = OracleSettings(output_format=OutputFormat.JSON)

    with patch(
        "lp_oracle.report.publisher.publish_to_stdout", new=AsyncMock()
    ) as mock_publish:
        await publish_report(config, sample_report)

    mock_publish.assert_awaited_once_with(sample_report, OutputFormat.JSON)


def test_format_report_table_lists_tokens_and_unresolved(sample_report: PricingReport):
    console = Console(record=True, width=200, force_terminal=False)

    format_report_table(sample_report, console=console)

    text = console.export_text()
    assert "STX-USDC LP" in text
    assert "+15.00%" in text
    assert "hybrid" in text
    assert "cyclic" in text
    assert "SP3K8...KBR9.pool-alex" in text
    assert "no usable price for SP1.alex" in text


def test_format_usd():
    assert _format_usd(None) == "—"
    assert _format_usd(1234.5) == "$1,234.50"
    assert _format_usd(0.0123) == "$0.012300"


def test_format_deviation_highlights_arbitrage():
    assert _format_deviation(None, False) == "—"
    assert _format_deviation(-3.0, False) == "-3.00%"
    assert _format_deviation(12.5, True) == "[bold red]+12.50%[/]"


def test_truncate_contract_id():
    assert _truncate_contract_id("SP1.pool") == "SP1.pool"
    assert (
        _truncate_contract_id("SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9.sbtc-token")
        == "SP3K8...KBR9.sbtc-token"
    )
