"""
Тесты для Bulk Exchange

Coverage:
- Перенос балансов × multiplier во внешний контракт
- Дубликаты holder index обрабатываются один раз
- Прерывание посередине: частичный результат остаётся (без отката)
- Owner-only доступ через PreSaleToken
"""

import pytest

from src.core.config import OracleSettings, SaleSettings
from src.core.domain.errors import (
    BulkExchangeInterrupted,
    ContractDestroyed,
    Overflow,
    Unauthorized,
)
from src.core.domain.units import UINT256_MAX
from src.exchange import BulkExchange, ExchangeCredit
from src.ledger import BalanceLedger, LedgerState
from src.oracle import InMemoryOracleChannel
from src.sale import InMemoryFundsGateway, PreSaleToken

OWNER = "owner"
ALICE = "alice"
BOB = "bob"


class RecordingToken:
    """Внешний контракт, записывающий credit; может падать на заданном держателе."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.credits = []

    def credit(self, holder, amount):
        if holder == self.fail_on:
            raise RuntimeError(f"credit rejected for {holder}")
        self.credits.append((holder, amount))


@pytest.fixture
def token():
    """Holder index: owner, alice, bob, alice (alice ушла в ноль и вернулась)."""
    settings = SaleSettings(
        owner=OWNER,
        initial_supply=1000,
        oracle=OracleSettings(oracle_address="oracle"),
    )
    token = PreSaleToken(settings, channel=InMemoryOracleChannel(), funds=InMemoryFundsGateway())
    token.transfer(OWNER, ALICE, 100)
    token.transfer(ALICE, BOB, 100)
    token.transfer(BOB, ALICE, 40)
    return token


class TestBulkExchange:
    """Обмен через PreSaleToken.exchange_to_ico."""

    def test_holder_index_has_duplicate(self, token):
        assert token.ledger.holder_index == (OWNER, ALICE, BOB, ALICE)

    def test_exchange_all_holders(self, token):
        target = RecordingToken()

        report = token.exchange_to_ico(OWNER, target, 2)

        assert target.credits == [(OWNER, 1800), (ALICE, 80), (BOB, 120)]
        assert report.holders() == (OWNER, ALICE, BOB)
        assert report.skipped_duplicates == 1
        assert report.total_tokens == 1000
        assert report.total_credited == 2000
        assert token.total_supply == 0
        assert token.ledger.balances() == {}

    def test_zero_balances_skipped(self, token):
        token.transfer(BOB, OWNER, 60)
        target = RecordingToken()

        report = token.exchange_to_ico(OWNER, target, 1)

        assert [h for h, _ in target.credits] == [OWNER, ALICE]
        assert report.skipped_empty == 1

    def test_interrupted_keeps_partial_result(self, token):
        target = RecordingToken(fail_on=BOB)

        with pytest.raises(BulkExchangeInterrupted) as exc_info:
            token.exchange_to_ico(OWNER, target, 2)

        err = exc_info.value
        assert err.holder == BOB
        assert isinstance(err.cause, RuntimeError)
        assert err.report.holders() == (OWNER, ALICE)
        # Уже обменянные держатели остаются обнулёнными
        assert token.balance_of(OWNER) == 0
        assert token.balance_of(ALICE) == 0
        assert token.balance_of(BOB) == 60
        assert token.total_supply == 60

    def test_resume_after_interruption(self, token):
        with pytest.raises(BulkExchangeInterrupted):
            token.exchange_to_ico(OWNER, RecordingToken(fail_on=BOB), 2)

        target = RecordingToken()
        report = token.exchange_to_ico(OWNER, target, 2)

        assert target.credits == [(BOB, 120)]
        assert report.skipped_empty == 2

    def test_owner_only(self, token):
        target = RecordingToken()

        with pytest.raises(Unauthorized):
            token.exchange_to_ico(ALICE, target, 2)

        assert target.credits == []
        assert token.balance_of(ALICE) == 40

    def test_destroyed(self, token):
        token.kill(OWNER)
        with pytest.raises(ContractDestroyed):
            token.exchange_to_ico(OWNER, RecordingToken(), 2)


class TestBulkExchangeLedger:
    """BulkExchange напрямую над ledger."""

    def test_overflow_aborts_before_credit(self):
        ledger = BalanceLedger()
        ledger.restore(
            LedgerState(balances={"a": UINT256_MAX}, holder_index=("a",), total_supply=UINT256_MAX)
        )
        target = RecordingToken()

        with pytest.raises(Overflow):
            BulkExchange(ledger).run(target, 2)

        assert target.credits == []
        assert ledger.balance_of("a") == UINT256_MAX

    def test_overflow_on_later_holder_touches_nothing(self):
        """Overflow второго держателя обнаруживается до обмена первого."""
        big = UINT256_MAX // 2 + 1
        ledger = BalanceLedger()
        ledger.restore(
            LedgerState(
                balances={"a": 10, "b": big}, holder_index=("a", "b"), total_supply=10 + big
            )
        )
        target = RecordingToken()

        with pytest.raises(Overflow) as exc_info:
            BulkExchange(ledger).run(target, 2)

        assert not isinstance(exc_info.value, BulkExchangeInterrupted)
        assert target.credits == []
        assert ledger.balance_of("a") == 10
        assert ledger.balance_of("b") == big
        assert ledger.total_supply == 10 + big

    def test_multiplier_zero(self):
        ledger = BalanceLedger()
        ledger.mint("a", 10)

        report = BulkExchange(ledger).run(RecordingToken(), 0)

        assert report.credited == [ExchangeCredit(holder="a", balance=10, credited=0)]
        assert ledger.balance_of("a") == 0

    def test_empty_ledger(self):
        report = BulkExchange(BalanceLedger()).run(RecordingToken(), 3)
        assert report.credited == []
        assert report.total_credited == 0
