"""LP intrinsic value computation."""

from __future__ import annotations

from ..processors import calculate_all_intrinsic_values
from .context import PipelineContext


async def compute_intrinsic_values(ctx: PipelineContext) -> None:
    """Run the dependency-aware batch over the collected vaults and prices.

    Args:
        ctx: Pipeline context containing vaults and base prices

    Sets the batch result in the context.
    """
    log = ctx.state.logger

    log.info("Calculating LP intrinsic values...")
    batch = calculate_all_intrinsic_values(
        ctx.vaults_required,
        ctx.base_prices_required,
        ctx.state.settings,
        market_prices=ctx.market_prices,
    )

    for cycle in batch.graph.cycles:
        log.warning("Skipped cyclic LP tokens: %s", " -> ".join(cycle))
    if batch.arbitrage_opportunities:
        log.info("%d arbitrage opportunities found", len(batch.arbitrage_opportunities))

    ctx.batch = batch
