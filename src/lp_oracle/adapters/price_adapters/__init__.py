from __future__ import annotations

from .http_prices import HttpPriceAdapter
from .json_file import JsonFilePriceAdapter
from .stablecoin import StablecoinAdapter
from .subnet import SubnetAdapter

PRICE_ADAPTERS = [
    JsonFilePriceAdapter,
    HttpPriceAdapter,
    SubnetAdapter,
    StablecoinAdapter,
]

__all__ = [
    "PRICE_ADAPTERS",
    "HttpPriceAdapter",
    "JsonFilePriceAdapter",
    "StablecoinAdapter",
    "SubnetAdapter",
]
