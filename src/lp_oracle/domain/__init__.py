"""Domain models for the oracle."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from ..constants import DEFAULT_TOKEN_DECIMALS


class PriceSource(str, Enum):
    """Where a price in the working price table came from."""

    BASE = "base"
    INTRINSIC = "intrinsic"
    MARKET = "market"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class TokenRef:
    """A fungible token identified by its contract id.

    ``base`` is set on subnet tokens and names the mainnet token they are
    redeemable for.
    """

    contract_id: str
    symbol: str
    decimals: int = DEFAULT_TOKEN_DECIMALS
    base: str | None = None

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValueError(
                f"decimals must be non-negative for {self.contract_id}, got {self.decimals}"
            )


@dataclass(frozen=True)
class VaultPair:
    """Read-only snapshot of one liquidity pool.

    ``token_a`` / ``token_b`` are optional only so that malformed registry
    entries survive until the graph builder, which excludes them.
    ``total_supply`` is the LP token supply in raw base units, when known.
    """

    contract_id: str
    token_a: TokenRef | None
    token_b: TokenRef | None
    reserves_a: int
    reserves_b: int
    decimals: int = DEFAULT_TOKEN_DECIMALS
    fee_bps: int | None = None
    total_supply: int | None = None
    symbol: str | None = None

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValueError(
                f"decimals must be non-negative for {self.contract_id}, got {self.decimals}"
            )

    @property
    def display_symbol(self) -> str:
        if self.symbol:
            return self.symbol
        if self.token_a is not None and self.token_b is not None:
            return f"{self.token_a.symbol}-{self.token_b.symbol} LP"
        return "LP"


@dataclass(frozen=True)
class PriceEntry:
    """Current USD price of one token in the working price table."""

    token_id: str
    usd_price: float
    confidence: float
    source: PriceSource

    def __post_init__(self) -> None:
        if not math.isfinite(self.usd_price) or self.usd_price < 0:
            raise ValueError(
                f"usd_price must be a finite non-negative number for {self.token_id}, "
                f"got {self.usd_price}"
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be within [0, 1] for {self.token_id}, got {self.confidence}"
            )


PriceTable = dict[str, PriceEntry]


@dataclass(frozen=True)
class UnderlyingValue:
    """Human-unit amount and USD value of one side of a pool."""

    contract_id: str
    symbol: str
    amount: float
    usd_value: float


@dataclass(frozen=True)
class IntrinsicResult:
    """Outcome of pricing one LP token from its reserves.

    ``usd_price`` is the price the token should be listed at (intrinsic or
    blended with a market observation); ``intrinsic_value`` is always the
    reserve-derived figure. Both are per LP token when ``per_token`` is set
    and per pool otherwise.
    """

    token_id: str
    usd_price: float
    sbtc_ratio: float | None
    confidence: float
    level: int
    dependencies: tuple[str, ...]
    source: PriceSource
    intrinsic_value: float
    pool_value_usd: float
    per_token: bool
    breakdown: tuple[UnderlyingValue, UnderlyingValue]
    market_price: float | None = None
    price_deviation_pct: float | None = None
    is_arbitrage_opportunity: bool = False

    def to_price_entry(self) -> PriceEntry:
        return PriceEntry(
            token_id=self.token_id,
            usd_price=self.usd_price,
            confidence=self.confidence,
            source=self.source,
        )


__all__ = [
    "IntrinsicResult",
    "PriceEntry",
    "PriceSource",
    "PriceTable",
    "TokenRef",
    "UnderlyingValue",
    "VaultPair",
]
