"""Bulk Exchange — перенос всех балансов во внешний ICO-контракт.

Owner-only batch: для каждого держателя из holder index вызывается
credit(holder, balance * multiplier) внешнего контракта, затем локальный
баланс обнуляется.

НЕ атомарно: сбой внешнего вызова посередине оставляет часть балансов
обнулёнными (BulkExchangeInterrupted с частичным отчётом).

Дубликаты holder index обрабатываются один раз (первое вхождение),
нулевые балансы пропускаются. Overflow balance * multiplier проверяется
для всех держателей до первого credit.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Tuple

from src.core.domain.errors import BulkExchangeInterrupted
from src.core.domain.units import validate_amount
from src.core.math.safe_uint import checked_mul
from src.ledger.balance_ledger import BalanceLedger

logger = logging.getLogger(__name__)


class ExternalTokenContract(Protocol):
    """Внешний токен-контракт, принимающий обменянные балансы."""

    def credit(self, holder: str, amount: int) -> None:
        ...


class InMemoryTokenContract:
    """Внешний контракт, накапливающий зачисления по держателям (симуляции)."""

    def __init__(self):
        self.credits: Dict[str, int] = {}

    def credit(self, holder: str, amount: int) -> None:
        validate_amount(amount)
        self.credits[holder] = self.credits.get(holder, 0) + amount


@dataclass(frozen=True)
class ExchangeCredit:
    """Обмен одного держателя."""

    holder: str
    balance: int
    credited: int


@dataclass
class BulkExchangeReport:
    """Отчёт bulk exchange (частичный при прерывании)."""

    multiplier: int
    credited: List[ExchangeCredit] = field(default_factory=list)
    skipped_duplicates: int = 0
    skipped_empty: int = 0

    @property
    def total_tokens(self) -> int:
        return sum(c.balance for c in self.credited)

    @property
    def total_credited(self) -> int:
        return sum(c.credited for c in self.credited)

    def holders(self) -> Tuple[str, ...]:
        return tuple(c.holder for c in self.credited)


class BulkExchange:
    """Batch-обмен балансов ledger во внешний контракт."""

    def __init__(self, ledger: BalanceLedger):
        self.ledger = ledger

    def run(self, target: ExternalTokenContract, multiplier: int) -> BulkExchangeReport:
        """Обмен всех балансов.

        Проверка прав владельца — на стороне вызывающего (PreSaleToken).
        Все суммы credit считаются до первого внешнего вызова: Overflow
        не оставляет частично обменянных держателей.

        Raises:
            Overflow: balance * multiplier > UINT256_MAX (до любых изменений)
            BulkExchangeInterrupted: внешний credit упал посередине batch
        """
        validate_amount(multiplier, "multiplier")
        report = BulkExchangeReport(multiplier=multiplier)
        plan = self._plan(multiplier, report)

        for holder, balance, amount in plan:
            try:
                target.credit(holder, amount)
            except Exception as e:
                logger.error(
                    "Bulk exchange interrupted at %s after %d holders: %s",
                    holder,
                    len(report.credited),
                    e,
                )
                raise BulkExchangeInterrupted(holder, report, e) from e

            self.ledger.zero(holder)
            report.credited.append(
                ExchangeCredit(holder=holder, balance=balance, credited=amount)
            )

        logger.info(
            "Bulk exchange done: %d holders, %d tokens, %d credited (x%d)",
            len(report.credited),
            report.total_tokens,
            report.total_credited,
            multiplier,
        )
        return report

    def _plan(
        self, multiplier: int, report: BulkExchangeReport
    ) -> List[Tuple[str, int, int]]:
        """Держатели к обмену: (holder, balance, credit), первое вхождение, без нулей."""
        plan = []
        seen = set()

        for holder in self.ledger.holder_index:
            if holder in seen:
                report.skipped_duplicates += 1
                continue
            seen.add(holder)

            balance = self.ledger.balance_of(holder)
            if balance == 0:
                report.skipped_empty += 1
                continue

            plan.append((holder, balance, checked_mul(balance, multiplier)))

        return plan
