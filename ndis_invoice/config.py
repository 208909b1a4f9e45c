"""Runtime configuration, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_REGION = "VIC"
DEFAULT_TAX_RATE = Decimal("0")
DEFAULT_TRAVEL_KM = Decimal("27.5")
DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:8080",
    "http://localhost:3000",
    "http://127.0.0.1:8080",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_decimal(env: Mapping[str, str], key: str, default: Decimal) -> Decimal:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{key} must be a number, got '{raw}'") from None
    if not value.is_finite() or value < 0:
        raise ValueError(f"{key} must be a non-negative number, got '{raw}'")
    return value


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean, got '{raw}'")


def _env_list(env: Mapping[str, str], key: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in env.get(key, "").split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    tax_rate: Decimal = DEFAULT_TAX_RATE
    region: str = DEFAULT_REGION
    default_travel_km: Decimal = DEFAULT_TRAVEL_KM
    catalog_path: Optional[Path] = None
    randomize_travel: bool = False
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        catalog_path = env.get("NDIS_CATALOG_PATH", "").strip()
        return cls(
            tax_rate=_env_decimal(env, "NDIS_TAX_RATE", DEFAULT_TAX_RATE),
            region=env.get("NDIS_REGION", "").strip().upper() or DEFAULT_REGION,
            default_travel_km=_env_decimal(env, "NDIS_DEFAULT_TRAVEL_KM", DEFAULT_TRAVEL_KM),
            catalog_path=Path(catalog_path) if catalog_path else None,
            randomize_travel=_env_bool(env, "NDIS_RANDOMIZE_TRAVEL", False),
            allowed_origins=_env_list(env, "ALLOWED_ORIGINS") or DEFAULT_ALLOWED_ORIGINS,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
