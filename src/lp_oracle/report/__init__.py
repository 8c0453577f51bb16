from __future__ import annotations

from .generator import LpTokenLine, PricingReport, generate_report
from .publisher import publish_report

__all__ = [
    "LpTokenLine",
    "PricingReport",
    "generate_report",
    "publish_report",
]
