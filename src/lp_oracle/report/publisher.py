from __future__ import annotations

import json
import logging

from ..settings import OracleSettings, OutputFormat
from .formatter import format_report_table
from .generator import PricingReport

logger = logging.getLogger(__name__)


async def publish_to_stdout(
    report: PricingReport,
    output_format: OutputFormat = OutputFormat.TABLE,
) -> None:
    """Publish report to stdout.

    Args:
        report: The pricing report to publish
        output_format: TABLE for the rich dashboard, JSON for raw JSON
    """
    if output_format == OutputFormat.JSON:
        print(json.dumps(report.to_dict(), indent=2))
        return

    format_report_table(report)


async def publish_report(config: OracleSettings, report: PricingReport) -> None:
    """Publish the report in the configured format."""
    logger.debug("Publishing report as %s", config.output_format.value)
    await publish_to_stdout(report, config.output_format)
