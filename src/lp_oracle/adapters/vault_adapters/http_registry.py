from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import backoff
import requests

from ...domain import VaultPair
from ...settings import OracleSettings
from .base import BaseVaultAdapter, parse_vaults

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def _is_permanent_http_error(e: Exception) -> bool:
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRYABLE_STATUS_CODES
    )


class HttpVaultAdapter(BaseVaultAdapter):
    """Adapter reading the vault list from an HTTP registry.

    The registry may answer with a bare list of vaults or with an object
    holding the list under ``vaults`` or ``data``.
    """

    def __init__(self, config: OracleSettings):
        super().__init__(config)
        if not config.vaults_url:
            raise ValueError("vaults_url is required for the HTTP vault adapter")
        self.url = config.vaults_url

    @property
    def adapter_name(self) -> str:
        return "http_registry"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.api_key is not None:
            headers["Authorization"] = f"Bearer {self.config.api_key.get_secret_value()}"
        return headers

    async def fetch_payload(self) -> Any:
        """Fetch the raw registry payload, retrying transient failures."""

        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.config.http_max_tries,
            giveup=_is_permanent_http_error,
            jitter=backoff.full_jitter,
        )
        async def _fetch() -> Any:
            logger.debug(f"Calling {self.url}")
            response = await asyncio.to_thread(
                requests.get,
                self.url,
                headers=self._headers(),
                timeout=self.config.http_timeout,
            )
            response.raise_for_status()
            try:
                return response.json()
            except json.JSONDecodeError:
                raise ValueError("Invalid JSON from vault registry")

        return await _fetch()

    async def fetch_vaults(self) -> list[VaultPair]:
        payload = await self.fetch_payload()

        if isinstance(payload, dict):
            payload = payload.get("vaults", payload.get("data"))
        if not isinstance(payload, list):
            raise ValueError(f"Invalid vault registry response structure: {payload!r}")

        vaults = parse_vaults(payload, self.config.default_decimals)
        logger.info("Loaded %d pool vaults from %s", len(vaults), self.url)
        return vaults
