"""
Configuration — параметры развёртывания pre-sale контракта

Frozen dataclass конфигурации. SaleSettings.from_env() читает .env
(python-dotenv) и переменные окружения PRESALE_*.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from src.core.domain.tier import DEFAULT_TIERS, Tier
from src.core.domain.units import QUERY_DELAY_SECONDS


@dataclass(frozen=True)
class OracleSettings:
    """Конфигурация price feed.

    - oracle_address: единственный доверенный отправитель callback
    - query_delay_seconds: задержка повторного запроса после callback (1 час)
    - query_fee: плата за один запрос (wei), списывается с fee account
    """
    oracle_address: str
    query_delay_seconds: int = QUERY_DELAY_SECONDS
    query_fee: int = 0


@dataclass(frozen=True)
class SaleSettings:
    """Конфигурация продажи."""
    owner: str
    initial_supply: int
    oracle: OracleSettings
    tiers: tuple[Tier, ...] = field(default=DEFAULT_TIERS)

    def __post_init__(self):
        if not self.owner:
            raise ValueError("owner must be non-empty")
        if self.initial_supply < 0:
            raise ValueError(f"initial_supply cannot be negative: {self.initial_supply}")
        if not self.tiers:
            raise ValueError("at least one tier is required")

    @staticmethod
    def from_env(owner_override: Optional[str] = None) -> "SaleSettings":
        load_dotenv(find_dotenv(usecwd=True))

        owner = owner_override or os.getenv("PRESALE_OWNER", "").strip()
        if not owner:
            raise RuntimeError(
                "Missing PRESALE_OWNER. Put it in .env or export it."
            )

        oracle_address = os.getenv("PRESALE_ORACLE_ADDRESS", "").strip()
        if not oracle_address:
            raise RuntimeError(
                "Missing PRESALE_ORACLE_ADDRESS. Put it in .env or export it."
            )

        return SaleSettings(
            owner=owner,
            initial_supply=_env_int("PRESALE_INITIAL_SUPPLY", 0),
            oracle=OracleSettings(
                oracle_address=oracle_address,
                query_delay_seconds=_env_int(
                    "PRESALE_QUERY_DELAY_SECONDS", QUERY_DELAY_SECONDS
                ),
                query_fee=_env_int("PRESALE_QUERY_FEE", 0),
            ),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None
