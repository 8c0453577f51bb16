from __future__ import annotations

import logging

from ...domain import PriceEntry, PriceSource, TokenRef
from ...settings import OracleSettings
from .base import BasePriceAdapter, PriceData

logger = logging.getLogger(__name__)

STABLECOIN_USD_PRICE = 1.0


class StablecoinAdapter(BasePriceAdapter):
    """Prices known stablecoins at their $1.00 redemption value.

    Runs last so that an observed oracle price always wins.
    """

    def __init__(self, config: OracleSettings):
        super().__init__(config)
        self.symbols = set(config.stablecoin_symbols)

    @property
    def adapter_name(self) -> str:
        return "stablecoin"

    async def fetch_prices(
        self, tokens: list[TokenRef], prices_accumulator: PriceData
    ) -> PriceData:
        for token in prices_accumulator.missing(tokens):
            if token.symbol not in self.symbols:
                continue
            logger.debug(f" Pricing stablecoin {token.symbol} ({token.contract_id}) at $1")
            prices_accumulator.prices[token.contract_id] = PriceEntry(
                token_id=token.contract_id,
                usd_price=STABLECOIN_USD_PRICE,
                confidence=1.0,
                source=PriceSource.BASE,
            )
        return prices_accumulator
