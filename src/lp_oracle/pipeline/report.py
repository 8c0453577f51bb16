"""Report generation."""

from __future__ import annotations

from ..report import generate_report
from ..report import publish_report as publish_report_impl
from .context import PipelineContext


async def build_report(ctx: PipelineContext) -> None:
    """Generate the pricing report.

    Args:
        ctx: Pipeline context containing the batch result and base prices

    Sets the report in the context.
    """
    log = ctx.state.logger

    log.info("Generating report...")
    ctx.report = generate_report(
        ctx.batch_required,
        base_prices={
            token_id: entry.usd_price
            for token_id, entry in ctx.base_prices_required.items()
        },
        validation_failures=ctx.validation_failures,
    )


async def publish_report(ctx: PipelineContext) -> None:
    """Publish the pricing report in the configured output format."""
    await publish_report_impl(ctx.state.settings, ctx.report_required)
