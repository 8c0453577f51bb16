from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lp_oracle.adapters.price_validators.base import BasePriceValidator, CheckResult

if TYPE_CHECKING:
    from lp_oracle.adapters.price_adapters.base import PriceData

logger = logging.getLogger(__name__)


class PositivePricesValidator(BasePriceValidator):
    """Flags zero prices, which would make every pool built on them unpriceable."""

    @property
    def name(self) -> str:
        return "Positive Prices Validator"

    async def validate_prices(self, price_data: PriceData) -> CheckResult:
        zero_priced = {
            token_id: entry.usd_price
            for token_id, entry in price_data.prices.items()
            if entry.usd_price <= 0
        }

        if not zero_priced:
            return CheckResult.ok(f"All {len(price_data.prices)} prices are positive")

        for token_id, price in zero_priced.items():
            logger.warning(f"Invalid price for {token_id}: {price}")
        details = ", ".join(f"{token_id}: {price}" for token_id, price in zero_priced.items())
        return CheckResult.fail(
            f"Found {len(zero_priced)} token(s) with non-positive prices: {details}"
        )
