"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio

from ..state import AppState
from .context import PipelineContext
from .intrinsic import compute_intrinsic_values
from .pricing import price_tokens
from .report import build_report, publish_report
from .vaults import collect_vaults


async def run_pricing(state: AppState) -> PipelineContext:
    """Execute the complete LP pricing pipeline.

    This is a thin orchestrator that sequences the pipeline steps:
    1. Vault collection
    2. Base price fetching and validation
    3. Dependency-aware intrinsic valuation
    4. Report generation
    5. Publishing

    The global timeout only bounds this sequence as a whole; the pricing
    computation itself has no timeout.

    Args:
        state: Application state containing settings and logger

    Returns:
        The pipeline context with every stage's output.
    """
    s = state.settings
    log = state.logger

    log.info("Starting LP pricing run")

    timeout_s = s.global_timeout_seconds

    ctx = PipelineContext(state=state)

    async def _run_pipeline() -> None:
        await collect_vaults(ctx)
        await price_tokens(ctx)
        await compute_intrinsic_values(ctx)
        await build_report(ctx)
        await publish_report(ctx)

    try:
        if timeout_s is None or timeout_s <= 0:
            await _run_pipeline()
        else:
            async with asyncio.timeout(timeout_s):
                await _run_pipeline()
    except asyncio.TimeoutError as exc:
        log.error(
            "Pricing pipeline timed out",
            extra={"timeout_seconds": timeout_s},
        )
        raise asyncio.TimeoutError(
            f"Pricing run exceeded global timeout {timeout_s}s\n"
            " N.B. This can be changed via `global_timeout_seconds` "
            "or CLI flag `--global-timeout-seconds`."
        ) from exc

    log.info("Pricing run completed")
    return ctx
