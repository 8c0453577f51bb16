from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from ...constants import POOL_VAULT_TYPE
from ...domain import TokenRef, VaultPair
from ...settings import OracleSettings

logger = logging.getLogger(__name__)


def _first(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field_name}: {value!r}")
    try:
        return int(value) if not isinstance(value, str) else int(value.strip())
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {field_name}: {value!r}") from e


def parse_token(payload: Any, default_decimals: int) -> TokenRef | None:
    """Normalize a registry token object into a TokenRef.

    Returns None when the payload carries no contract id, which the graph
    builder later reports as missing token info.
    A ``base`` key marks a subnet token and is kept as its mainnet token.
    """
    if not isinstance(payload, dict):
        return None
    contract_id = _first(payload, "contractId", "contract_id")
    if not contract_id:
        return None
    decimals = _first(payload, "decimals")
    base = _first(payload, "base")
    return TokenRef(
        contract_id=str(contract_id),
        symbol=str(_first(payload, "symbol") or contract_id),
        decimals=default_decimals
        if decimals is None
        else _to_int(decimals, "decimals"),
        base=str(base) if base else None,
    )


def parse_vault(payload: Any, default_decimals: int) -> VaultPair:
    """Normalize one registry vault entry into a VaultPair.

    Accepts both the camelCase registry format and snake_case keys.

    Raises:
        ValueError: If the entry has no contract id or non-integer reserves.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid vault entry: {payload!r}")

    contract_id = _first(payload, "contractId", "contract_id")
    if not contract_id:
        raise ValueError(f"Vault entry without contract id: {payload!r}")

    decimals = _first(payload, "decimals")
    fee = _first(payload, "feeBps", "fee_bps", "fee")
    total_supply = _first(payload, "totalSupply", "total_supply")

    return VaultPair(
        contract_id=str(contract_id),
        token_a=parse_token(_first(payload, "tokenA", "token_a"), default_decimals),
        token_b=parse_token(_first(payload, "tokenB", "token_b"), default_decimals),
        reserves_a=_to_int(_first(payload, "reservesA", "reserves_a") or 0, "reservesA"),
        reserves_b=_to_int(_first(payload, "reservesB", "reserves_b") or 0, "reservesB"),
        decimals=default_decimals if decimals is None else _to_int(decimals, "decimals"),
        fee_bps=None if fee is None else _to_int(fee, "fee"),
        total_supply=None
        if total_supply is None
        else _to_int(total_supply, "totalSupply"),
        symbol=_first(payload, "symbol"),
    )


def is_pool_entry(payload: Any) -> bool:
    """Registry entries without a type are assumed to be pools."""
    if not isinstance(payload, dict):
        return False
    vault_type = payload.get("type")
    return vault_type is None or str(vault_type).upper() == POOL_VAULT_TYPE


def parse_vaults(entries: list[Any], default_decimals: int) -> list[VaultPair]:
    """Parse pool-type entries, skipping malformed ones with a warning."""
    vaults: list[VaultPair] = []
    for entry in entries:
        if not is_pool_entry(entry):
            logger.debug("Skipping non-pool registry entry: %s", entry)
            continue
        try:
            vaults.append(parse_vault(entry, default_decimals))
        except ValueError as e:
            logger.warning("Skipping malformed vault entry: %s", e)
    return vaults


class BaseVaultAdapter(ABC):
    """Abstract base class for vault registry adapters."""

    def __init__(self, config: OracleSettings):
        """Initialize the adapter with configuration."""
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_vaults(self) -> list[VaultPair]:
        """Return the current pool-type vaults in registry order."""
        ...
