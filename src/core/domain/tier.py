"""
Tier — Модель ценового тира pre-sale

Immutable Pydantic модель: лимит токенов, проданное количество и цена за
токен в центах. Любое изменение `sold` создаёт новый экземпляр (with_sold).
"""

from typing import Final

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Количество тиров в продаже
TIER_COUNT: Final[int] = 3


# =============================================================================
# TIER MODEL
# =============================================================================


class Tier(BaseModel):
    """
    Ценовой тир (capacity bucket).

    Инвариант: 0 <= sold <= limit. unit_price_cents неизменна.
    """

    limit: int = Field(..., ge=0, description="Лимит токенов тира")
    sold: int = Field(default=0, ge=0, description="Продано токенов в тире")
    unit_price_cents: int = Field(..., gt=0, description="Цена одного токена (USD cents)")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_sold_within_limit(self) -> "Tier":
        """Проверка инварианта sold <= limit."""
        if self.sold > self.limit:
            raise ValueError(f"sold {self.sold} exceeds tier limit {self.limit}")
        return self

    @property
    def remaining(self) -> int:
        """Оставшаяся ёмкость тира в токенах."""
        return self.limit - self.sold

    @property
    def capacity_cents(self) -> int:
        """Стоимость всей оставшейся ёмкости тира (cents)."""
        return self.remaining * self.unit_price_cents

    def with_sold(self, tokens: int) -> "Tier":
        """Новый экземпляр с увеличенным sold."""
        if tokens < 0:
            raise ValueError(f"sold increment cannot be negative: {tokens}")
        # model_copy(update=...) не запускает валидаторы, поэтому новый Tier
        return Tier(
            limit=self.limit,
            sold=self.sold + tokens,
            unit_price_cents=self.unit_price_cents,
        )


# Тиры по умолчанию: по 1 000 000 токенов за 28, 30 и 32 цента
DEFAULT_TIERS: Final[tuple[Tier, ...]] = (
    Tier(limit=1_000_000, unit_price_cents=28),
    Tier(limit=1_000_000, unit_price_cents=30),
    Tier(limit=1_000_000, unit_price_cents=32),
)
