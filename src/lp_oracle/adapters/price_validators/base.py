from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from lp_oracle.adapters.price_adapters.base import PriceData
from lp_oracle.settings import OracleSettings


@dataclass
class CheckResult:
    """Outcome of one price validator.

    ``retry_recommended`` marks failures that a fresh fetch may fix, such
    as a price feed that has not answered yet.
    """

    passed: bool
    message: str
    retry_recommended: bool = False

    @classmethod
    def ok(cls, message: str) -> CheckResult:
        return cls(passed=True, message=message)

    @classmethod
    def fail(cls, message: str, *, retry: bool = False) -> CheckResult:
        return cls(passed=False, message=message, retry_recommended=retry)


class BasePriceValidator(ABC):
    """Inspects the fetched base prices before any LP token is valued."""

    def __init__(self, config: OracleSettings):
        self.config = config

    @property
    @abstractmethod
    def name(self) -> str:
        """Label used in logs and in the report's validation failures."""
        ...

    @abstractmethod
    async def validate_prices(self, price_data: PriceData) -> CheckResult:
        """Check the accumulated prices of every price adapter."""
        ...
