"""Tier Pricing Policy — расход ёмкости тиров для одного платежа.

Порядок расчёта для remaining_cents:
1. Тиры обходятся строго по порядку (возрастание цены)
2. capacity_cents = (limit - sold) * unit_price_cents
3. spendable = min(capacity_cents, remaining_cents)
4. tokens_here = min(spendable // unit_price_cents, available_tokens - tokens_so_far)
5. remaining_cents -= tokens_here * unit_price_cents
6. Остановка, как только remaining_cents == 0 — более дорогие тиры
   пропускаются, без back-fill

Покупатель всегда получает самые дешёвые доступные токены первыми.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from src.core.domain.tier import DEFAULT_TIERS, TIER_COUNT, Tier
from src.core.domain.units import validate_amount


@dataclass(frozen=True)
class TierFill:
    """Покупка внутри одного тира."""

    tier_index: int
    tokens: int
    unit_price_cents: int
    cost_cents: int


@dataclass(frozen=True)
class TierQuote:
    """Результат расчёта платежа по тирам (без изменения состояния)."""

    fills: Tuple[TierFill, ...]
    tokens: int
    cost_cents: int

    # Диагностика
    input_cents: int
    leftover_cents: int

    @property
    def is_empty(self) -> bool:
        return self.tokens == 0


class TierPricingPolicy:
    """Упорядоченный набор из трёх тиров с фиксированными ценами.

    quote() — чистый расчёт, apply() — фиксация sold.
    """

    def __init__(self, tiers: Optional[Iterable[Tier]] = None):
        """
        Args:
            tiers: тиры по возрастанию цены (default: DEFAULT_TIERS)
        """
        tiers = tuple(tiers) if tiers is not None else DEFAULT_TIERS
        if len(tiers) != TIER_COUNT:
            raise ValueError(f"Expected {TIER_COUNT} tiers, got {len(tiers)}")
        for prev, nxt in zip(tiers, tiers[1:]):
            if nxt.unit_price_cents <= prev.unit_price_cents:
                raise ValueError(
                    "Tiers must be ordered by strictly ascending unit price: "
                    f"{prev.unit_price_cents} then {nxt.unit_price_cents}"
                )
        self._tiers: Tuple[Tier, ...] = tiers

    @property
    def tiers(self) -> Tuple[Tier, ...]:
        return self._tiers

    def quote(self, remaining_cents: int, available_tokens: int) -> TierQuote:
        """Расчёт покупки на remaining_cents по тирам.

        Args:
            remaining_cents: стоимость платежа в центах
            available_tokens: реальный остаток бенефициара (может быть жёстче
                номинальных лимитов тиров)

        Returns:
            TierQuote; tokens == 0 означает, что купить нечего
        """
        validate_amount(remaining_cents, "remaining_cents")
        validate_amount(available_tokens, "available_tokens")

        input_cents = remaining_cents
        tokens_so_far = 0
        cost_so_far = 0
        fills = []

        for index, tier in enumerate(self._tiers):
            if remaining_cents == 0:
                break

            spendable = min(tier.capacity_cents, remaining_cents)
            tokens_here = min(
                spendable // tier.unit_price_cents,
                available_tokens - tokens_so_far,
            )
            cost_here = tokens_here * tier.unit_price_cents

            tokens_so_far += tokens_here
            cost_so_far += cost_here
            remaining_cents -= cost_here

            if tokens_here > 0:
                fills.append(
                    TierFill(
                        tier_index=index,
                        tokens=tokens_here,
                        unit_price_cents=tier.unit_price_cents,
                        cost_cents=cost_here,
                    )
                )

        return TierQuote(
            fills=tuple(fills),
            tokens=tokens_so_far,
            cost_cents=cost_so_far,
            input_cents=input_cents,
            leftover_cents=remaining_cents,
        )

    def apply(self, quote: TierQuote) -> None:
        """Фиксация sold по результатам quote."""
        tiers = list(self._tiers)
        for fill in quote.fills:
            tiers[fill.tier_index] = tiers[fill.tier_index].with_sold(fill.tokens)
        self._tiers = tuple(tiers)

    def snapshot(self) -> Tuple[Tier, ...]:
        return self._tiers

    def restore(self, state: Tuple[Tier, ...]) -> None:
        self._tiers = state
