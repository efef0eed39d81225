"""
Тесты для PreSaleToken — внешней поверхности контракта

Coverage:
- Создание: начальная эмиссия владельцу + немедленный запрос цены
- Полный поток: callback → платёж → выплаты
- Сохранение суммы балансов (conservation)
- Откат всех изменений вызова при ошибке
- Owner-only операции: set_owner, kill
- Снапшот состояния, проверенный JSON Schema
"""

import pytest

from src.core.config import OracleSettings, SaleSettings
from src.core.domain.errors import (
    ContractDestroyed,
    InsufficientBalance,
    RateUninitialized,
    TransferFailed,
    Unauthorized,
    UnauthorizedCallback,
)
from src.core.domain.events import BurnEvent, NoticeKind, PriceFeedNotice
from src.core.domain.sale_state import PriceFeedState
from src.core.domain.units import ONE_UNIT
from src.oracle import FeeAccount, InMemoryOracleChannel
from src.sale import InMemoryFundsGateway, PreSaleToken

OWNER = "owner"
ORACLE = "oracle"
ALICE = "alice"
BOB = "bob"
SUPPLY = 1_000_000
NOW = 1_700_000_000.0


def make_token(supply=SUPPLY, query_fee=0, fee_funds=0):
    settings = SaleSettings(
        owner=OWNER,
        initial_supply=supply,
        oracle=OracleSettings(oracle_address=ORACLE, query_fee=query_fee),
    )
    channel = InMemoryOracleChannel(fee=query_fee)
    funds = InMemoryFundsGateway()
    token = PreSaleToken(
        settings,
        channel=channel,
        funds=funds,
        fee_account=FeeAccount(fee_funds),
        clock=lambda: NOW,
    )
    return token, channel, funds


@pytest.fixture
def token():
    token, _, _ = make_token()
    return token


@pytest.fixture
def active_token():
    """Токен с курсом $2.00 (200 cents)."""
    token, channel, funds = make_token()
    token.oracle_callback(ORACLE, "q-1", "2.00")
    return token, channel, funds


def conserved(token: PreSaleToken) -> bool:
    return sum(token.ledger.balances().values()) == token.total_supply


# =============================================================================
# ТЕСТЫ: Создание
# =============================================================================


class TestConstruction:
    """Начальное состояние контракта."""

    def test_initial_supply_to_owner(self, token):
        assert token.balance_of(OWNER) == SUPPLY
        assert token.total_supply == SUPPLY
        assert token.ledger.holder_index == (OWNER,)

    def test_immediate_price_query(self):
        token, channel, _ = make_token()

        assert len(channel.requests) == 1
        assert channel.last_request.delay_seconds == 0
        assert token.price_feed.pending_queries == ("q-1",)
        notices = token.event_log.of_type(PriceFeedNotice)
        assert [n.kind for n in notices] == [NoticeKind.QUERY_SENT]

    def test_underfunded_query_at_construction(self):
        """Нехватка средств на fee не мешает созданию контракта."""
        token, channel, _ = make_token(query_fee=100, fee_funds=0)

        assert channel.requests == []
        notices = token.event_log.of_type(PriceFeedNotice)
        assert [n.kind for n in notices] == [NoticeKind.QUERY_SKIPPED]
        assert token.balance_of(OWNER) == SUPPLY

    def test_rate_uninitialized_at_start(self, token):
        assert token.current_rate() == 0
        with pytest.raises(RateUninitialized):
            token.receive_payment(ALICE, ONE_UNIT)

    def test_zero_supply(self):
        token, _, _ = make_token(supply=0)
        assert token.total_supply == 0
        assert token.ledger.holder_index == ()


# =============================================================================
# ТЕСТЫ: Продажа
# =============================================================================


class TestSaleFlow:
    """Callback оракула → платёж."""

    def test_purchase_after_callback(self, active_token):
        token, _, funds = active_token

        receipt = token.receive_payment(ALICE, 14 * ONE_UNIT)

        assert receipt.tokens == 100
        assert token.balance_of(ALICE) == 100
        assert token.balance_of(OWNER) == SUPPLY - 100
        assert funds.received(OWNER) == 14 * ONE_UNIT
        assert token.tiers[0].sold == 100
        assert conserved(token)

    def test_callback_rearms(self, active_token):
        token, channel, _ = active_token

        assert token.current_rate() == 200
        assert channel.last_request.delay_seconds == 3600
        assert token.price_feed.pending_queries == ("q-2",)

    def test_forged_callback_changes_nothing(self, active_token):
        token, channel, _ = active_token
        events_before = token.events

        with pytest.raises(UnauthorizedCallback):
            token.oracle_callback("mallory", "q-2", "0.01")

        assert token.current_rate() == 200
        assert token.events == events_before
        assert len(channel.requests) == 2

    def test_failed_payment_rolls_back(self, active_token):
        token, _, funds = active_token
        funds.reject(OWNER)

        with pytest.raises(TransferFailed):
            token.receive_payment(ALICE, 14 * ONE_UNIT)

        assert token.balance_of(ALICE) == 0
        assert token.tiers[0].sold == 0
        assert conserved(token)

    def test_sale_exhausts_owner_balance(self):
        token, _, _ = make_token(supply=50)
        token.oracle_callback(ORACLE, "q-1", "2.00")

        receipt = token.receive_payment(ALICE, 14 * ONE_UNIT)

        assert receipt.tokens == 50
        assert receipt.refund == 7 * ONE_UNIT
        assert token.balance_of(OWNER) == 0


# =============================================================================
# ТЕСТЫ: Transfer / burn
# =============================================================================


class TestLedgerOperations:
    """Переводы и сжигание через внешнюю поверхность."""

    def test_transfer(self, token):
        assert token.transfer(OWNER, ALICE, 500) is True
        assert token.balance_of(ALICE) == 500

    def test_transfer_insufficient(self, token):
        with pytest.raises(InsufficientBalance):
            token.transfer(ALICE, BOB, 1)

    def test_burn_scenario(self, token):
        """alice сжигает все 500 токенов; повторное сжигание 1 падает."""
        token.transfer(OWNER, ALICE, 500)

        event = token.burn(ALICE, 500)

        assert event == BurnEvent(holder=ALICE, amount=500)
        assert token.total_supply == SUPPLY - 500
        assert token.burn_events() == [BurnEvent(holder=ALICE, amount=500)]

        with pytest.raises(InsufficientBalance):
            token.burn(ALICE, 1)

        assert token.total_supply == SUPPLY - 500
        assert len(token.burn_events()) == 1
        assert conserved(token)

    def test_conservation_over_mixed_operations(self, active_token):
        token, _, _ = active_token

        token.transfer(OWNER, ALICE, 1000)
        token.receive_payment(BOB, 3 * ONE_UNIT)
        token.transfer(BOB, ALICE, 10)
        token.burn(ALICE, 300)
        with pytest.raises(InsufficientBalance):
            token.transfer(BOB, ALICE, 10**9)

        assert conserved(token)
        assert token.total_supply == SUPPLY - 300


# =============================================================================
# ТЕСТЫ: Owner
# =============================================================================


class TestOwnerOperations:
    """set_owner / kill."""

    def test_set_owner(self, token):
        token.set_owner(OWNER, ALICE)
        assert token.owner == ALICE

        with pytest.raises(Unauthorized):
            token.set_owner(OWNER, BOB)

    def test_set_owner_does_not_move_beneficiary(self, active_token):
        """Proceeds и пул продажи остаются у бенефициара, заданного при создании."""
        token, _, funds = active_token
        token.set_owner(OWNER, ALICE)

        token.receive_payment(BOB, 14 * ONE_UNIT)

        assert token.beneficiary == OWNER
        assert funds.received(OWNER) == 14 * ONE_UNIT
        assert token.balance_of(OWNER) == SUPPLY - 100

    def test_set_owner_unauthorized(self, token):
        with pytest.raises(Unauthorized) as exc_info:
            token.set_owner(ALICE, ALICE)
        assert exc_info.value.operation == "set_owner"
        assert token.owner == OWNER

    def test_kill_releases_fee_funds(self):
        token, _, funds = make_token(query_fee=10, fee_funds=100)

        released = token.kill(OWNER)

        assert released == 90
        assert funds.received(OWNER) == 90
        assert token.fee_account.balance == 0
        assert token.destroyed

    def test_kill_unauthorized(self, token):
        with pytest.raises(Unauthorized):
            token.kill(ALICE)
        assert not token.destroyed

    def test_destroyed_rejects_calls(self, token):
        token.kill(OWNER)

        with pytest.raises(ContractDestroyed):
            token.transfer(OWNER, ALICE, 1)
        with pytest.raises(ContractDestroyed):
            token.oracle_callback(ORACLE, "q-1", "2.00")
        with pytest.raises(ContractDestroyed):
            token.kill(OWNER)

        assert token.balance_of(OWNER) == SUPPLY

    def test_fund_queries(self):
        token, channel, _ = make_token(query_fee=10)

        assert token.fund_queries(25) == 25
        outcome = token.update(60)

        assert outcome.sent
        assert channel.last_request.delay_seconds == 60
        assert token.fee_account.balance == 15


# =============================================================================
# ТЕСТЫ: Снапшот
# =============================================================================


class TestStateSnapshot:
    """Персистентное состояние."""

    def test_snapshot_initial(self, token):
        snapshot = token.state_snapshot()

        assert snapshot.owner == OWNER
        assert snapshot.total_supply == SUPPLY
        assert snapshot.price_feed.state == PriceFeedState.UNINITIALIZED
        assert snapshot.price_feed.pending_queries == ["q-1"]
        assert snapshot.price_feed.last_updated_at is None

    def test_snapshot_after_sale(self, active_token):
        token, _, _ = active_token
        token.receive_payment(ALICE, 14 * ONE_UNIT)

        snapshot = token.state_snapshot()

        assert snapshot.price_feed.state == PriceFeedState.ACTIVE
        assert snapshot.price_feed.rate_cents == 200
        assert snapshot.price_feed.last_updated_at == NOW
        assert snapshot.holder_index == [OWNER, ALICE]
        assert {b.holder: b.balance for b in snapshot.balances} == {
            OWNER: SUPPLY - 100,
            ALICE: 100,
        }
        assert snapshot.tiers[0].sold == 100
