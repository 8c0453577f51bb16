from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from ...domain import TokenRef
from ...settings import OracleSettings
from .base import BasePriceAdapter, PriceData, parse_price_map

logger = logging.getLogger(__name__)


class JsonFilePriceAdapter(BasePriceAdapter):
    """Adapter reading USD prices from a local JSON snapshot."""

    def __init__(self, config: OracleSettings):
        super().__init__(config)
        self.path = Path(config.prices_file) if config.prices_file else None

    @property
    def adapter_name(self) -> str:
        return "json_file_prices"

    @property
    def enabled(self) -> bool:
        return self.path is not None

    @staticmethod
    def _load(path: Path) -> Any:
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in price file {path}: {e}") from e

    async def fetch_prices(
        self, tokens: list[TokenRef], prices_accumulator: PriceData
    ) -> PriceData:
        if self.path is None:
            return prices_accumulator

        payload = await asyncio.to_thread(self._load, self.path)
        fetched = parse_price_map(payload, self.config.base_price_confidence)
        return self.merge(tokens, fetched, prices_accumulator)
