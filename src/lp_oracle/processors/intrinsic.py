"""Intrinsic value of a single LP token.

The intrinsic value is what the pool's reserves are worth at current
prices of the underlying tokens, independent of any market quote for the
LP token itself. When a market quote exists the two are reconciled: the
deviation is reported, large deviations are flagged as arbitrage, and the
listed price is either the intrinsic value or a confidence-weighted blend.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

from ..domain import (
    IntrinsicResult,
    PriceEntry,
    PriceSource,
    TokenRef,
    UnderlyingValue,
    VaultPair,
)
from ..graph.builder import DependencyNode
from ..settings import OracleSettings
from ..units import from_base_units

logger = logging.getLogger(__name__)

MARKET_SOURCES = frozenset({PriceSource.MARKET, PriceSource.BASE})


def _usable_price(prices: Mapping[str, PriceEntry], token: TokenRef) -> PriceEntry | None:
    entry = prices.get(token.contract_id)
    if entry is None or entry.usd_price <= 0:
        return None
    return entry


def not_computable_reason(
    vault: VaultPair, prices: Mapping[str, PriceEntry]
) -> str | None:
    """Explain why ``vault`` cannot be priced from ``prices``, or return None."""
    if vault.token_a is None or vault.token_b is None:
        return "vault is missing token info"
    if vault.reserves_a <= 0 or vault.reserves_b <= 0:
        return f"empty reserves ({vault.reserves_a}, {vault.reserves_b})"
    if vault.total_supply is not None and vault.total_supply <= 0:
        return f"non-positive LP supply ({vault.total_supply})"
    missing = [
        token.contract_id
        for token in (vault.token_a, vault.token_b)
        if _usable_price(prices, token) is None
    ]
    if missing:
        return f"no usable price for {', '.join(missing)}"
    return None


def detect_arbitrage(
    market_price: float | None,
    intrinsic_value: float | None,
    threshold_pct: float,
) -> tuple[float | None, bool]:
    """Return ``(deviation_pct, is_opportunity)`` of market vs intrinsic.

    The deviation is signed: positive when the market trades above the
    intrinsic value. It is None when either figure is missing or not
    positive.
    """
    if not market_price or not intrinsic_value or market_price <= 0 or intrinsic_value <= 0:
        return None, False

    deviation_pct = (market_price - intrinsic_value) / intrinsic_value * 100
    return deviation_pct, abs(deviation_pct) > threshold_pct


def blend_prices(
    market: PriceEntry,
    intrinsic_price: float,
    intrinsic_confidence: float,
    settings: OracleSettings,
) -> tuple[float, float, PriceSource]:
    """Pick the listed price from a market quote and an intrinsic value.

    Returns:
        ``(usd_price, confidence, source)``. A market quote below the
        confidence floor is ignored in favour of the intrinsic value;
        otherwise the two are averaged weighted by confidence.
    """
    if market.confidence < settings.market_confidence_floor:
        return intrinsic_price, intrinsic_confidence, PriceSource.INTRINSIC

    total_weight = market.confidence + intrinsic_confidence
    if total_weight <= 0:
        return intrinsic_price, intrinsic_confidence, PriceSource.INTRINSIC

    hybrid_price = (
        market.usd_price * market.confidence + intrinsic_price * intrinsic_confidence
    ) / total_weight
    confidence = min(
        settings.max_hybrid_confidence, max(market.confidence, intrinsic_confidence)
    )
    return hybrid_price, confidence, PriceSource.HYBRID


def _anchor_ratio(
    usd_price: float, prices: Mapping[str, PriceEntry], anchor_token_id: str
) -> float | None:
    anchor = prices.get(anchor_token_id)
    if anchor is None or anchor.usd_price <= 0:
        return None
    return usd_price / anchor.usd_price


def calculate_intrinsic_value(
    vault: VaultPair,
    prices: Mapping[str, PriceEntry],
    settings: OracleSettings | None = None,
    *,
    node: DependencyNode | None = None,
) -> IntrinsicResult | None:
    """Price one LP token from its reserves.

    Args:
        vault: The pool backing the LP token.
        prices: Price table that must already hold both underlying tokens.
            An entry for the LP token itself with a market or base source is
            treated as its observed market price.
        settings: Pricing parameters; defaults are used when omitted.
        node: The token's dependency-graph node, used for its level and LP
            dependencies.

    Returns:
        The result, or None when the token is not computable (missing or
        non-positive underlying price, empty reserves, zero LP supply).
    """
    settings = settings or OracleSettings()

    reason = not_computable_reason(vault, prices)
    if reason is not None:
        logger.debug("Cannot price %s: %s", vault.contract_id, reason)
        return None

    token_a, token_b = vault.token_a, vault.token_b
    if token_a is None or token_b is None:
        return None
    price_a = prices[token_a.contract_id]
    price_b = prices[token_b.contract_id]

    amount_a = from_base_units(vault.reserves_a, token_a.decimals)
    amount_b = from_base_units(vault.reserves_b, token_b.decimals)
    value_a = amount_a * price_a.usd_price
    value_b = amount_b * price_b.usd_price
    pool_value = value_a + value_b

    per_token = vault.total_supply is not None
    if vault.total_supply is not None:
        supply = from_base_units(vault.total_supply, vault.decimals)
        if supply <= 0 or not math.isfinite(supply):
            logger.debug(
                "Cannot price %s: LP supply %s is not usable", vault.contract_id, supply
            )
            return None
        intrinsic_value = pool_value / supply
    else:
        intrinsic_value = pool_value

    if not math.isfinite(intrinsic_value) or intrinsic_value <= 0:
        logger.debug(
            "Cannot price %s: intrinsic value %s is not usable",
            vault.contract_id,
            intrinsic_value,
        )
        return None

    intrinsic_confidence = min(
        settings.intrinsic_confidence, price_a.confidence, price_b.confidence
    )

    usd_price = intrinsic_value
    confidence = intrinsic_confidence
    source = PriceSource.INTRINSIC
    market_price: float | None = None
    deviation_pct: float | None = None
    is_arbitrage = False

    market = prices.get(vault.contract_id)
    if market is not None and market.source in MARKET_SOURCES and market.usd_price > 0:
        market_price = market.usd_price
        deviation_pct, is_arbitrage = detect_arbitrage(
            market_price, intrinsic_value, settings.arbitrage_threshold_pct
        )
        usd_price, confidence, source = blend_prices(
            market, intrinsic_value, intrinsic_confidence, settings
        )
        if is_arbitrage:
            logger.info(
                "Arbitrage opportunity on %s: market $%.6f vs intrinsic $%.6f (%+.2f%%)",
                vault.contract_id,
                market_price,
                intrinsic_value,
                deviation_pct,
            )

    return IntrinsicResult(
        token_id=vault.contract_id,
        usd_price=usd_price,
        sbtc_ratio=_anchor_ratio(usd_price, prices, settings.anchor_token_id),
        confidence=confidence,
        level=node.level if node is not None else 0,
        dependencies=node.dependencies if node is not None else (),
        source=source,
        intrinsic_value=intrinsic_value,
        pool_value_usd=pool_value,
        per_token=per_token,
        breakdown=(
            UnderlyingValue(token_a.contract_id, token_a.symbol, amount_a, value_a),
            UnderlyingValue(token_b.contract_id, token_b.symbol, amount_b, value_b),
        ),
        market_price=market_price,
        price_deviation_pct=deviation_pct,
        is_arbitrage_opportunity=is_arbitrage,
    )
