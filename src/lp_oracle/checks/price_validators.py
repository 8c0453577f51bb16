from __future__ import annotations

import asyncio
import logging

from ..adapters.price_adapters.base import PriceData
from ..adapters.price_validators import PRICE_VALIDATORS
from ..adapters.price_validators.base import BasePriceValidator, CheckResult
from ..settings import OracleSettings

logger = logging.getLogger(__name__)


class PriceValidationError(Exception):
    """Raised in strict mode when a price validation fails."""

    def __init__(self, message: str, retry_recommended: bool = False):
        super().__init__(message)
        self.retry_recommended = retry_recommended


def _collect_failures(
    validators: list[BasePriceValidator],
    results: list[CheckResult | BaseException],
) -> tuple[list[str], bool]:
    """Log each outcome; return the failure messages and whether a retry may help."""
    failures: list[str] = []
    retry_recommended = False

    for validator, result in zip(validators, results):
        if isinstance(result, BaseException):
            logger.error(f"Validator '{validator.name}' raised exception: {result}")
            failures.append(f"{validator.name}: {result}")
        elif result.passed:
            logger.info(f"✓ {validator.name}: {result.message}")
        else:
            logger.warning(f"✗ {validator.name}: {result.message}")
            failures.append(result.message)
            retry_recommended = retry_recommended or result.retry_recommended

    return failures, retry_recommended


async def run_price_validations(
    config: OracleSettings,
    price_data: PriceData,
) -> list[str]:
    """Run every registered price validator concurrently.

    Returns:
        Messages of the validations that failed; empty when all passed.

    Raises:
        PriceValidationError: If any validation fails and
            ``strict_price_validation`` is enabled.
    """
    logger.info("Running price validations...")
    validators = [validator_cls(config) for validator_cls in PRICE_VALIDATORS]

    results = await asyncio.gather(
        *[validator.validate_prices(price_data) for validator in validators],
        return_exceptions=True,
    )
    failures, retry_recommended = _collect_failures(validators, results)

    if failures and config.strict_price_validation:
        raise PriceValidationError(
            f"Price validations failed: {'; '.join(failures)}",
            retry_recommended=retry_recommended,
        )
    return failures
