from __future__ import annotations

from typing import TYPE_CHECKING

from lp_oracle.adapters.price_validators.base import BasePriceValidator, CheckResult

if TYPE_CHECKING:
    from lp_oracle.adapters.price_adapters.base import PriceData


class AnchorPriceValidator(BasePriceValidator):
    """Checks that the anchor token (sBTC) is priced.

    Without it no anchor ratio can be reported for LP tokens.
    """

    @property
    def name(self) -> str:
        return "Anchor Price Validator"

    async def validate_prices(self, price_data: PriceData) -> CheckResult:
        anchor_id = self.config.anchor_token_id
        entry = price_data.prices.get(anchor_id)

        if entry is None:
            return CheckResult.fail(f"Anchor token {anchor_id} has no price", retry=True)
        if entry.usd_price <= 0:
            return CheckResult.fail(
                f"Anchor token {anchor_id} has non-positive price {entry.usd_price}",
                retry=True,
            )
        return CheckResult.ok(f"Anchor token priced at ${entry.usd_price:,.2f}")
