from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ...domain import PriceEntry, PriceSource, PriceTable, TokenRef
from ...settings import OracleSettings

logger = logging.getLogger(__name__)


@dataclass
class PriceData:
    """Prices accumulated across price adapters."""

    prices: PriceTable = field(default_factory=dict)  # contract_id -> PriceEntry

    def missing(self, tokens: list[TokenRef]) -> list[TokenRef]:
        return [token for token in tokens if token.contract_id not in self.prices]


def parse_price_map(
    payload: Any, default_confidence: float, source: PriceSource = PriceSource.BASE
) -> PriceTable:
    """Parse ``{contractId: usdPrice}`` style payloads into price entries.

    The map may sit under a ``prices`` key, and each value may be a bare
    number or an object with ``usdPrice`` and optional ``confidence``.
    Entries that do not parse are skipped with a warning.

    Raises:
        ValueError: If the payload is not a mapping.
    """
    if isinstance(payload, dict) and isinstance(payload.get("prices"), dict):
        payload = payload["prices"]
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid price payload structure: {payload!r}")

    table: PriceTable = {}
    for token_id, value in payload.items():
        confidence = default_confidence
        if isinstance(value, dict):
            confidence = value.get("confidence", default_confidence)
            value = value.get("usdPrice", value.get("usd_price", value.get("price")))
        try:
            table[str(token_id)] = PriceEntry(
                token_id=str(token_id),
                usd_price=float(value),
                confidence=float(confidence),
                source=source,
            )
        except (TypeError, ValueError) as e:
            logger.warning(f" Invalid price data for {token_id}: {e}")
    return table


class BasePriceAdapter(ABC):
    """Abstract base class for price adapters."""

    def __init__(self, config: OracleSettings):
        """Initialize the adapter with configuration."""
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @property
    def enabled(self) -> bool:
        """Whether the adapter has what it needs to run."""
        return True

    @abstractmethod
    async def fetch_prices(
        self, tokens: list[TokenRef], prices_accumulator: PriceData
    ) -> PriceData:
        """Fetch prices for the given tokens.

        Adapters only fill tokens that no earlier adapter priced.
        """
        ...

    def merge(
        self, tokens: list[TokenRef], fetched: PriceTable, prices_accumulator: PriceData
    ) -> PriceData:
        """Merge fetched prices for the requested, still-unpriced tokens."""
        added = 0
        for token in prices_accumulator.missing(tokens):
            entry = fetched.get(token.contract_id)
            if entry is not None:
                prices_accumulator.prices[token.contract_id] = entry
                added += 1
        logger.debug(
            "%s priced %d of %d requested tokens", self.adapter_name, added, len(tokens)
        )
        return prices_accumulator
