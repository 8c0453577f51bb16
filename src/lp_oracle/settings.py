"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    DEFAULT_ARBITRAGE_THRESHOLD_PCT,
    DEFAULT_BASE_PRICE_CONFIDENCE,
    DEFAULT_INTRINSIC_CONFIDENCE,
    DEFAULT_MARKET_CONFIDENCE_FLOOR,
    DEFAULT_MAX_HYBRID_CONFIDENCE,
    DEFAULT_STABLECOIN_SYMBOLS,
    DEFAULT_TOKEN_DECIMALS,
    SBTC_CONTRACT_ID,
)

load_dotenv()

SECRET_FIELDS = {"api_key"}


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


CONFIG_ENV_VAR = "LP_ORACLE_CONFIG"
CONFIG_SECTION = "lp_oracle"
LOCAL_CONFIG = Path("lp-oracle.toml")
# Relative paths in a config file are read relative to that file
PATH_FIELDS = ("vaults_file", "prices_file")


def config_file_path() -> Path | None:
    """Config file to load: $LP_ORACLE_CONFIG, ./lp-oracle.toml, then the user config."""
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit)
    for candidate in (
        LOCAL_CONFIG,
        Path.home() / ".config" / "lp-oracle" / "config.toml",
    ):
        if candidate.exists():
            return candidate
    return None


class TomlConfigSource(PydanticBaseSettingsSource):
    """Lowest-precedence settings read from a TOML file.

    Keys may sit at the top level or under an ``[lp_oracle]`` table.
    Secrets are refused: they belong in the environment or on the CLI.
    """

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
        super().__init__(settings_cls)
        self._path = path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        if self._path is None or not self._path.exists():
            return {}

        with self._path.open("rb") as f:
            data = tomllib.load(f)
        body = data.get(CONFIG_SECTION, data)
        if not isinstance(body, dict):
            return {}

        leaked = SECRET_FIELDS.intersection(body)
        if leaked:
            raise ValueError(
                f"Security violation: '{sorted(leaked)[0]}' found in TOML config file. "
                f"Secrets must only be provided via environment variables or CLI flags."
            )

        base_dir = self._path.parent
        for key in PATH_FIELDS:
            value = body.get(key)
            if isinstance(value, str) and not Path(value).is_absolute():
                body[key] = str(base_dir / value)
        return body


class OracleSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with LP_ORACLE_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- data sources ---
    vaults_url: str | None = None
    vaults_file: Path | None = None
    prices_url: str | None = None
    prices_file: Path | None = None
    api_key: SecretStr | None = None

    # --- pricing model ---
    anchor_token_id: str = SBTC_CONTRACT_ID
    default_decimals: int = Field(default=DEFAULT_TOKEN_DECIMALS, ge=0)
    intrinsic_confidence: float = Field(
        default=DEFAULT_INTRINSIC_CONFIDENCE, ge=0.0, le=1.0
    )
    market_confidence_floor: float = Field(
        default=DEFAULT_MARKET_CONFIDENCE_FLOOR, ge=0.0, le=1.0
    )
    max_hybrid_confidence: float = Field(
        default=DEFAULT_MAX_HYBRID_CONFIDENCE, ge=0.0, le=1.0
    )
    arbitrage_threshold_pct: float = Field(
        default=DEFAULT_ARBITRAGE_THRESHOLD_PCT,
        gt=0,
        description="Market vs intrinsic deviation (%) above which an arbitrage is flagged.",
    )
    base_price_confidence: float = Field(
        default=DEFAULT_BASE_PRICE_CONFIDENCE, ge=0.0, le=1.0
    )
    stablecoin_symbols: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STABLECOIN_SYMBOLS)
    )

    # --- checks ---
    strict_price_validation: bool = False
    price_validation_retries: int = Field(default=0, ge=0)
    price_validation_timeout: float = Field(default=5.0, ge=0)

    # --- HTTP settings ---
    http_timeout: float = 10.0
    http_max_tries: int = Field(default=5, ge=1)
    global_timeout_seconds: float | None = 60.0

    # --- output ---
    log_level: str = "INFO"
    output_format: OutputFormat = OutputFormat.TABLE

    model_config = SettingsConfigDict(
        env_prefix="LP_ORACLE_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @model_validator(mode="after")
    def validate_confidence_ordering(self) -> "OracleSettings":
        """Validate that the market floor does not exceed the hybrid cap."""
        if self.market_confidence_floor > self.max_hybrid_confidence:
            raise ValueError(
                f"market_confidence_floor ({self.market_confidence_floor}) "
                f"must not exceed max_hybrid_confidence ({self.max_hybrid_confidence})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Explicit precedence: CLI > ENV > CONFIG FILE."""
        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            TomlConfigSource(settings_cls, config_file_path()),  # CONFIG (lowest)
            file_secret_settings,
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-ready dict with secrets redacted."""
        data = self.model_dump(mode="json")
        if self.api_key:
            data["api_key"] = "***redacted***"
        return data

    @property
    def has_vault_source(self) -> bool:
        return self.vaults_file is not None or self.vaults_url is not None
