"""Price fetching and validation."""

from __future__ import annotations

from typing import Any

import backoff

from ..adapters import PRICE_ADAPTERS
from ..adapters.price_adapters.base import PriceData
from ..checks.price_validators import PriceValidationError, run_price_validations
from ..domain import PriceEntry, PriceSource, PriceTable, TokenRef, VaultPair
from .context import PipelineContext


def tokens_to_price(vaults: list[VaultPair], anchor_token_id: str) -> list[TokenRef]:
    """Every token whose price the batch may need, in registry order.

    Includes underlying tokens, the mainnet base of subnet tokens, the LP
    tokens themselves (for market observations) and the anchor token.
    """
    tokens: dict[str, TokenRef] = {}
    for vault in vaults:
        for token in (vault.token_a, vault.token_b):
            if token is None:
                continue
            tokens.setdefault(token.contract_id, token)
            if token.base is not None:
                tokens.setdefault(
                    token.base, TokenRef(token.base, token.symbol, token.decimals)
                )
        tokens.setdefault(
            vault.contract_id,
            TokenRef(vault.contract_id, vault.display_symbol, vault.decimals),
        )
    tokens.setdefault(anchor_token_id, TokenRef(anchor_token_id, "sBTC", 8))
    return list(tokens.values())


def split_market_prices(
    prices: PriceTable, lp_token_ids: set[str]
) -> tuple[PriceTable, PriceTable]:
    """Split fetched prices into base prices and LP-token market prices."""
    base: PriceTable = {}
    market: PriceTable = {}
    for token_id, entry in prices.items():
        if token_id in lp_token_ids:
            market[token_id] = PriceEntry(
                token_id=token_id,
                usd_price=entry.usd_price,
                confidence=entry.confidence,
                source=PriceSource.MARKET,
            )
        else:
            base[token_id] = entry
    return base, market


async def price_tokens(ctx: PipelineContext) -> None:
    """Fetch prices for all tokens referenced by the vaults and validate them.

    Args:
        ctx: Pipeline context containing state and vaults

    Sets the price data, base prices and LP market prices in the context.

    Raises:
        PriceValidationError: If price validation fails in strict mode
    """
    s = ctx.state.settings
    log = ctx.state.logger
    vaults = ctx.vaults_required

    tokens = tokens_to_price(vaults, s.anchor_token_id)
    price_adapters = [AdapterClass(s) for AdapterClass in PRICE_ADAPTERS]

    def _should_giveup(exc: Exception) -> bool:
        return isinstance(exc, PriceValidationError) and not exc.retry_recommended

    def _on_backoff(details: Any) -> None:
        log.warning(
            "Price validation failed (attempt %d of %d): %s",
            details["tries"],
            s.price_validation_retries + 1,
            details.get("exception", details.get("value")),
        )

    @backoff.on_exception(
        backoff.constant,
        PriceValidationError,
        max_tries=s.price_validation_retries + 1,
        interval=s.price_validation_timeout,
        giveup=_should_giveup,
        on_backoff=_on_backoff,
    )
    async def _fetch_and_validate() -> tuple[PriceData, list[str]]:
        log.info("Fetching prices for %d tokens...", len(tokens))
        price_data = PriceData()
        for price_adapter in price_adapters:
            if not price_adapter.enabled:
                log.debug("Skipping disabled price adapter %s", price_adapter.adapter_name)
                continue
            price_data = await price_adapter.fetch_prices(tokens, price_data)
            log.debug(
                "Price adapter %s: %d prices so far",
                price_adapter.adapter_name,
                len(price_data.prices),
            )
        failures = await run_price_validations(s, price_data)
        return price_data, failures

    price_data, failures = await _fetch_and_validate()

    missing = price_data.missing(tokens)
    if missing:
        log.info("%d tokens have no price", len(missing))
        log.debug("Unpriced tokens: %s", [token.contract_id for token in missing])

    base_prices, market_prices = split_market_prices(
        price_data.prices, {vault.contract_id for vault in vaults}
    )

    ctx.price_data = price_data
    ctx.base_prices = base_prices
    ctx.market_prices = market_prices
    ctx.validation_failures = failures
