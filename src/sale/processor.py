"""Sale Transaction Processor — обработка входящего платежа.

Порядок (checks → effects → interactions):
1. rate == 0 → RateUninitialized
2. value_cents = paid_value * rate // ONE_UNIT (sub-cent остаток теряется)
3. Расчёт по тирам (TierPricingPolicy.quote), ограниченный остатком бенефициара
4. tokens == 0 → NothingPurchasable (ничего не списано, ничего не возвращено)
5. Фиксация sold в тирах + перевод токенов бенефициар → плательщик
6. paid_amount = cost_cents * ONE_UNIT // rate → бенефициару
7. paid_value - paid_amount → плательщику (refund)

Шаги 5-7 — единый atomic scope: сбой перевода на шаге 6 или 7 откатывает
и ledger, и тиры.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, Tuple

from src.core.domain.errors import NothingPurchasable, RateUninitialized
from src.core.domain.units import cents_to_value, validate_amount, value_to_cents
from src.core.transaction import Snapshotable, atomic
from src.ledger.balance_ledger import BalanceLedger
from src.pricing.tier_policy import TierFill, TierPricingPolicy
from src.sale.funds import FundsGateway

logger = logging.getLogger(__name__)


class RateSource(Protocol):
    """Источник курса, доступный процессору только на чтение."""

    def current_rate(self) -> int:
        ...


@dataclass(frozen=True)
class SaleReceipt:
    """Результат обработки платежа."""

    payer: str
    paid_value: int
    rate_cents: int

    tokens: int
    cost_cents: int
    paid_amount: int
    refund: int

    # Диагностика
    value_cents: int
    fills: Tuple[TierFill, ...]


class SaleTransactionProcessor:
    """Оркестрация платежа: курс → тиры → ledger → выплаты."""

    def __init__(
        self,
        ledger: BalanceLedger,
        pricing: TierPricingPolicy,
        rate_source: RateSource,
        funds: FundsGateway,
        beneficiary: str,
    ):
        self.ledger = ledger
        self.pricing = pricing
        self.rate_source = rate_source
        self.funds = funds
        self.beneficiary = beneficiary

    def process_payment(self, payer: str, paid_value: int) -> SaleReceipt:
        """Покупка токенов на paid_value wei.

        Raises:
            RateUninitialized: курс ещё не получен
            NothingPurchasable: платёж не покрывает ни одного токена
            TransferFailed: proceeds или refund не доставлены (полный откат)
        """
        validate_amount(paid_value, "paid_value")

        rate = self.rate_source.current_rate()
        if rate == 0:
            raise RateUninitialized("Exchange rate is not initialized, sale is disabled")

        value_cents = value_to_cents(paid_value, rate)
        available = self.ledger.balance_of(self.beneficiary)
        quote = self.pricing.quote(value_cents, available)

        if quote.is_empty:
            raise NothingPurchasable(
                f"Payment of {paid_value} ({value_cents} cents) buys no tokens"
            )

        paid_amount = cents_to_value(quote.cost_cents, rate)
        refund = paid_value - paid_amount

        participants = [self.ledger, self.pricing]
        if isinstance(self.funds, Snapshotable):
            participants.append(self.funds)

        with atomic(*participants):
            # effects
            self.pricing.apply(quote)
            self.ledger.transfer(self.beneficiary, payer, quote.tokens)
            # interactions: proceeds до refund
            self.funds.send(self.beneficiary, paid_amount)
            self.funds.send(payer, refund)

        logger.info(
            "Sold %d tokens to %s for %d cents (forwarded=%d, refund=%d, rate=%d)",
            quote.tokens,
            payer,
            quote.cost_cents,
            paid_amount,
            refund,
            rate,
        )

        return SaleReceipt(
            payer=payer,
            paid_value=paid_value,
            rate_cents=rate,
            tokens=quote.tokens,
            cost_cents=quote.cost_cents,
            paid_amount=paid_amount,
            refund=refund,
            value_cents=value_cents,
            fills=quote.fills,
        )
