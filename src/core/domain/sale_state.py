"""
SaleState — Модель снапшота состояния pre-sale контракта

Immutable Pydantic модель, представляющая персистентное состояние:
балансы, holder index, тиры, курс, владелец.
Полная совместимость с JSON Schema (contracts/schema/sale_state.json).
"""

from enum import Enum

from pydantic import BaseModel, Field

from .tier import Tier


# =============================================================================
# ENUMS
# =============================================================================


class PriceFeedState(str, Enum):
    """
    Состояние price feed.

    UNINITIALIZED: курс ещё не получен (rate == 0), продажа отключена
    ACTIVE: курс получен и периодически обновляется
    """

    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"


# =============================================================================
# NESTED MODELS
# =============================================================================


class HolderBalance(BaseModel):
    """Баланс одного держателя."""

    holder: str = Field(..., min_length=1, description="Идентификатор держателя")
    balance: int = Field(..., ge=0, description="Баланс токенов")

    model_config = {"frozen": True}


class PriceFeed(BaseModel):
    """Состояние price feed в снапшоте."""

    state: PriceFeedState = Field(..., description="Состояние price feed")
    rate_cents: int = Field(
        ..., ge=0, description="Курс: центов за одну целую единицу базовой валюты"
    )
    oracle_address: str = Field(..., min_length=1, description="Доверенный адрес оракула")
    pending_queries: list[str] = Field(
        default_factory=list, description="Отправленные, но не отвеченные запросы"
    )
    last_updated_at: float | None = Field(
        None, description="Время последнего успешного callback (Unix seconds, nullable)"
    )

    model_config = {"frozen": True}


# =============================================================================
# SALE STATE MODEL
# =============================================================================


class SaleStateSnapshot(BaseModel):
    """
    Снапшот персистентного состояния контракта.

    Immutable модель (frozen=True). Содержит:
    - Владельца и бенефициара
    - Балансы и holder index (с возможными дубликатами)
    - Три ценовых тира
    - Состояние price feed
    """

    schema_version: str = Field(..., pattern="^1$", description="Версия схемы")
    owner: str = Field(..., min_length=1, description="Текущий владелец (admin)")
    beneficiary: str = Field(..., min_length=1, description="Бенефициар продажи")
    destroyed: bool = Field(default=False, description="Контракт уничтожен (kill)")
    total_supply: int = Field(..., ge=0, description="Общее количество токенов")

    balances: list[HolderBalance] = Field(
        default_factory=list, description="Ненулевые балансы"
    )
    holder_index: list[str] = Field(
        default_factory=list, description="Append-only holder index (с дубликатами)"
    )
    tiers: list[Tier] = Field(..., min_length=1, description="Ценовые тиры по порядку")
    price_feed: PriceFeed = Field(..., description="Состояние price feed")

    model_config = {"frozen": True}
