from __future__ import annotations

from .batch import BatchResult, calculate_all_intrinsic_values
from .intrinsic import (
    blend_prices,
    calculate_intrinsic_value,
    detect_arbitrage,
    not_computable_reason,
)

__all__ = [
    "BatchResult",
    "calculate_all_intrinsic_values",
    "blend_prices",
    "calculate_intrinsic_value",
    "detect_arbitrage",
    "not_computable_reason",
]
