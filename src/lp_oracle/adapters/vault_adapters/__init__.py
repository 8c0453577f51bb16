from __future__ import annotations

from ...settings import OracleSettings
from .base import BaseVaultAdapter, parse_vault, parse_vaults
from .http_registry import HttpVaultAdapter
from .json_file import JsonFileVaultAdapter


def get_vault_adapter(config: OracleSettings) -> BaseVaultAdapter:
    """Pick the vault source: a local snapshot wins over the HTTP registry."""
    if config.vaults_file is not None:
        return JsonFileVaultAdapter(config)
    if config.vaults_url:
        return HttpVaultAdapter(config)
    raise ValueError("Either vaults_file or vaults_url must be configured")


__all__ = [
    "BaseVaultAdapter",
    "HttpVaultAdapter",
    "JsonFileVaultAdapter",
    "get_vault_adapter",
    "parse_vault",
    "parse_vaults",
]
