from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import backoff
import requests

from ...domain import TokenRef
from ...settings import OracleSettings
from .base import BasePriceAdapter, PriceData, parse_price_map

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class HttpPriceAdapter(BasePriceAdapter):
    """Adapter for an HTTP price API returning USD prices keyed by contract id.

    The whole price list is fetched once; aggregating oracles is the
    API's concern.
    """

    def __init__(self, config: OracleSettings):
        super().__init__(config)
        self.url = config.prices_url

    @property
    def adapter_name(self) -> str:
        return "http_prices"

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def fetch_price_payload(self) -> Any:
        """Fetch the raw price payload.

        Raises:
            ValueError: If the response is not valid JSON
            requests.exceptions.RequestException: If request fails
        """

        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.config.http_max_tries,
            giveup=lambda e: (
                isinstance(e, requests.exceptions.HTTPError)
                and e.response is not None
                and e.response.status_code not in RETRYABLE_STATUS_CODES
            ),
            jitter=backoff.full_jitter,
        )
        async def _fetch() -> Any:
            logger.debug(f"Calling {self.url}")
            response = await asyncio.to_thread(
                requests.get, self.url, timeout=self.config.http_timeout
            )
            response.raise_for_status()
            try:
                return response.json()
            except json.JSONDecodeError:
                raise ValueError("Invalid JSON from price API")

        return await _fetch()

    async def fetch_prices(
        self, tokens: list[TokenRef], prices_accumulator: PriceData
    ) -> PriceData:
        if not prices_accumulator.missing(tokens):
            return prices_accumulator

        try:
            payload = await self.fetch_price_payload()
            fetched = parse_price_map(payload, self.config.base_price_confidence)
        except requests.exceptions.RequestException as e:
            logger.warning(f" Network error fetching prices from {self.url}: {e}")
            return prices_accumulator
        except ValueError as e:
            logger.warning(f" Invalid price data from {self.url}: {e}")
            return prices_accumulator

        return self.merge(tokens, fetched, prices_accumulator)
