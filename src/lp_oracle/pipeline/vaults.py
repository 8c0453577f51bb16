"""Vault registry collection."""

from __future__ import annotations

from ..adapters import get_vault_adapter
from .context import PipelineContext


async def collect_vaults(ctx: PipelineContext) -> None:
    """Load the pool-type vaults from the configured registry.

    Args:
        ctx: Pipeline context containing state

    Sets the vaults in the context.
    """
    log = ctx.state.logger
    adapter = get_vault_adapter(ctx.state.settings)

    log.info("Loading vaults via %s...", adapter.adapter_name)
    vaults = await adapter.fetch_vaults()
    log.info("Loaded %d pool vaults", len(vaults))

    ctx.vaults = vaults
