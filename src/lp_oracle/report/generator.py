from __future__ import annotations

from dataclasses import asdict, dataclass, field

from ..constants import UNRESOLVED_LEVEL
from ..domain import IntrinsicResult
from ..processors import BatchResult


@dataclass
class LpTokenLine:
    """One priced LP token as listed in the report."""

    symbol: str
    result: IntrinsicResult

    def to_dict(self) -> dict[str, object]:
        data = asdict(self.result)
        data["symbol"] = self.symbol
        data["source"] = self.result.source.value
        return data


@dataclass
class PricingReport:
    """LP pricing report for one registry snapshot."""

    lp_tokens: list[LpTokenLine]
    level_distribution: dict[int, int]
    max_level: int = UNRESOLVED_LEVEL
    cycles: list[list[str]] = field(default_factory=list)
    unresolved: dict[str, str] = field(default_factory=dict)
    base_prices: dict[str, float] = field(default_factory=dict)
    validation_failures: list[str] = field(default_factory=list)

    @property
    def arbitrage_opportunities(self) -> list[LpTokenLine]:
        return [line for line in self.lp_tokens if line.result.is_arbitrage_opportunity]

    def to_dict(self) -> dict[str, object]:
        """Convert report to dictionary format."""
        return {
            "lp_tokens": [line.to_dict() for line in self.lp_tokens],
            "level_distribution": {
                str(level): count for level, count in self.level_distribution.items()
            },
            "max_level": self.max_level,
            "cycles": self.cycles,
            "unresolved": self.unresolved,
            "base_prices": self.base_prices,
            "validation_failures": self.validation_failures,
            "arbitrage_opportunities": [
                line.result.token_id for line in self.arbitrage_opportunities
            ],
        }


def generate_report(
    batch: BatchResult,
    base_prices: dict[str, float] | None = None,
    validation_failures: list[str] | None = None,
) -> PricingReport:
    """Generate a pricing report from a batch run.

    LP tokens are listed in processing order, lowest level first.
    """
    lines = [
        LpTokenLine(
            symbol=batch.graph.nodes[token_id].vault.display_symbol,
            result=result,
        )
        for token_id, result in batch.results.items()
    ]

    return PricingReport(
        lp_tokens=lines,
        level_distribution=batch.graph.level_distribution,
        max_level=batch.graph.max_level,
        cycles=[list(cycle) for cycle in batch.graph.cycles],
        unresolved=dict(batch.unresolved),
        base_prices=dict(base_prices or {}),
        validation_failures=list(validation_failures or []),
    )
