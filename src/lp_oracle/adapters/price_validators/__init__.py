"""Price validators registry."""

from lp_oracle.adapters.price_validators.anchor_price import AnchorPriceValidator
from lp_oracle.adapters.price_validators.positive_prices import PositivePricesValidator

PRICE_VALIDATORS = [
    PositivePricesValidator,
    AnchorPriceValidator,
]
