from __future__ import annotations

import logging

from ...domain import PriceEntry, PriceSource, TokenRef
from .base import BasePriceAdapter, PriceData

logger = logging.getLogger(__name__)


class SubnetAdapter(BasePriceAdapter):
    """Prices subnet tokens at the price of the mainnet token they redeem for.

    Must run after the adapters that price mainnet tokens. A subnet token
    with its own observed price keeps it.
    """

    @property
    def adapter_name(self) -> str:
        return "subnet"

    async def fetch_prices(
        self, tokens: list[TokenRef], prices_accumulator: PriceData
    ) -> PriceData:
        for token in prices_accumulator.missing(tokens):
            if token.base is None:
                continue
            base_entry = prices_accumulator.prices.get(token.base)
            if base_entry is None:
                logger.debug(
                    f" No price for base token {token.base} of subnet token {token.contract_id}"
                )
                continue
            prices_accumulator.prices[token.contract_id] = PriceEntry(
                token_id=token.contract_id,
                usd_price=base_entry.usd_price,
                confidence=base_entry.confidence,
                source=PriceSource.BASE,
            )
        return prices_accumulator
