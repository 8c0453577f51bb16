from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..domain import IntrinsicResult, PriceEntry, PriceSource, PriceTable, VaultPair
from ..graph import DependencyGraph, build_dependency_graph, processing_order
from ..settings import OracleSettings
from .intrinsic import calculate_intrinsic_value, not_computable_reason

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Intrinsic values for every LP token that could be resolved."""

    results: dict[str, IntrinsicResult]
    graph: DependencyGraph
    prices: PriceTable
    unresolved: dict[str, str] = field(default_factory=dict)

    @property
    def arbitrage_opportunities(self) -> list[IntrinsicResult]:
        return [r for r in self.results.values() if r.is_arbitrage_opportunity]


def _seed_price_table(
    base_prices: Mapping[str, PriceEntry],
    market_prices: Mapping[str, PriceEntry] | None,
    graph: DependencyGraph,
) -> PriceTable:
    table: PriceTable = dict(base_prices)
    for token_id, entry in (market_prices or {}).items():
        if not graph.is_lp_token(token_id):
            table.setdefault(token_id, entry)
            continue
        if entry.source is not PriceSource.MARKET:
            entry = PriceEntry(
                token_id=entry.token_id,
                usd_price=entry.usd_price,
                confidence=entry.confidence,
                source=PriceSource.MARKET,
            )
        table[token_id] = entry
    return table


def calculate_all_intrinsic_values(
    vaults: Sequence[VaultPair],
    base_prices: Mapping[str, PriceEntry],
    settings: OracleSettings | None = None,
    *,
    market_prices: Mapping[str, PriceEntry] | None = None,
) -> BatchResult:
    """Price every LP token in one pass, lowest dependency level first.

    Args:
        vaults: Pool-type vaults in registry order.
        base_prices: Prices of non-LP tokens.
        settings: Pricing parameters; defaults are used when omitted.
        market_prices: Optional observed market prices, typically for LP
            tokens, reconciled against their intrinsic values.

    Returns:
        A BatchResult. Each call works on its own copy of the price table;
        the inputs are never mutated. Tokens that cannot be priced are
        listed in ``unresolved`` with a reason and never abort the batch.
    """
    settings = settings or OracleSettings()

    graph = build_dependency_graph(vaults)
    order = processing_order(graph)
    prices = _seed_price_table(base_prices, market_prices, graph)

    results: dict[str, IntrinsicResult] = {}
    unresolved: dict[str, str] = {
        contract_id: "dependency cycle" for contract_id in graph.unresolved
    }

    for contract_id in order:
        node = graph.nodes[contract_id]
        vault = node.vault

        try:
            result = calculate_intrinsic_value(vault, prices, settings, node=node)
        except ArithmeticError as e:
            logger.warning("Failed to price %s: %s", contract_id, e)
            unresolved[contract_id] = f"calculation failed: {e}"
            continue
        if result is None:
            unresolved[contract_id] = (
                not_computable_reason(vault, prices) or "intrinsic value not usable"
            )
            continue

        results[contract_id] = result
        prices[contract_id] = result.to_price_entry()

    for diagnostic in graph.excluded:
        if diagnostic.contract_id in results:
            continue
        unresolved.setdefault(diagnostic.contract_id, diagnostic.reason)

    logger.info(
        "Priced %d/%d LP tokens (levels %s, %d unresolved)",
        len(results),
        len(graph.nodes),
        graph.level_distribution,
        len(unresolved),
    )
    if unresolved:
        logger.debug("Unresolved LP tokens: %s", unresolved)

    return BatchResult(
        results=results, graph=graph, prices=prices, unresolved=unresolved
    )
