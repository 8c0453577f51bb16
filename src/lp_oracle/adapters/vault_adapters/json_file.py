from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from ...domain import VaultPair
from ...settings import OracleSettings
from .base import BaseVaultAdapter, parse_vaults

logger = logging.getLogger(__name__)


class JsonFileVaultAdapter(BaseVaultAdapter):
    """Adapter reading a registry snapshot saved as JSON."""

    def __init__(self, config: OracleSettings):
        super().__init__(config)
        if config.vaults_file is None:
            raise ValueError("vaults_file is required for the JSON file vault adapter")
        self.path = Path(config.vaults_file)

    @property
    def adapter_name(self) -> str:
        return "json_file"

    def _load(self) -> Any:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in vault file {self.path}: {e}") from e

    async def fetch_vaults(self) -> list[VaultPair]:
        payload = await asyncio.to_thread(self._load)

        if isinstance(payload, dict):
            payload = payload.get("vaults", payload.get("data"))
        if not isinstance(payload, list):
            raise ValueError(f"Vault file {self.path} does not contain a vault list")

        vaults = parse_vaults(payload, self.config.default_decimals)
        logger.info("Loaded %d pool vaults from %s", len(vaults), self.path)
        return vaults
