from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import OracleSettings

APP_LOGGER_NAME = "lp_oracle"


@dataclass
class AppState:
    """Settings and logger shared by every pipeline stage."""

    settings: OracleSettings
    logger: logging.Logger

    @classmethod
    def from_settings(cls, settings: OracleSettings) -> AppState:
        return cls(settings=settings, logger=logging.getLogger(APP_LOGGER_NAME))
