from __future__ import annotations

from .price_adapters import PRICE_ADAPTERS
from .vault_adapters import get_vault_adapter

__all__ = ["PRICE_ADAPTERS", "get_vault_adapter"]
