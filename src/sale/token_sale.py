"""PreSaleToken — внешняя поверхность pre-sale контракта.

Собирает компоненты:
- BalanceLedger (балансы, holder index, burn)
- TierPricingPolicy (три ценовых тира)
- PriceFeedClient (курс от оракула, периодический re-arm)
- SaleTransactionProcessor (входящие платежи)
- BulkExchange (owner-only перенос балансов)

Каждый изменяющий вызов выполняется в atomic(): исключение откатывает все
изменения вызова. Исключение — exchange_to_ico (batch, без отката).
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple

from src.core.config import SaleSettings
from src.core.contracts import validate_sale_state
from src.core.domain.errors import ContractDestroyed, Unauthorized
from src.core.domain.events import BurnEvent, Event, EventLog
from src.core.domain.sale_state import HolderBalance, PriceFeed, SaleStateSnapshot
from src.core.domain.tier import Tier
from src.core.transaction import Snapshotable, atomic
from src.exchange.bulk_exchange import BulkExchange, BulkExchangeReport, ExternalTokenContract
from src.ledger.balance_ledger import BalanceLedger
from src.oracle.channel import FeeAccount, OracleRequestChannel
from src.oracle.price_feed import PriceFeedClient, PriceFeedUpdate, QueryOutcome
from src.pricing.tier_policy import TierPricingPolicy
from src.sale.funds import FundsGateway
from src.sale.processor import SaleReceipt, SaleTransactionProcessor

logger = logging.getLogger(__name__)

SALE_STATE_SCHEMA_VERSION = "1"


class PreSaleToken:
    """Tiered pre-sale токен с oracle-gated продажей."""

    def __init__(
        self,
        settings: SaleSettings,
        channel: OracleRequestChannel,
        funds: FundsGateway,
        fee_account: Optional[FeeAccount] = None,
        ledger: Optional[BalanceLedger] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            settings: владелец, начальная эмиссия, тиры, параметры оракула
            channel: канал запросов к оракулу
            funds: gateway исходящих переводов (proceeds, refund)
            fee_account: средства контракта для оплаты запросов к оракулу
            ledger: ledger (default: новый пустой)
            clock: источник времени для price feed
        """
        self.settings = settings
        self.owner = settings.owner
        # Бенефициар фиксирован при создании: пул продажи и получатель proceeds
        self.beneficiary = settings.owner
        self.destroyed = False

        self.event_log = ledger.event_log if ledger is not None else EventLog()
        self.ledger = ledger if ledger is not None else BalanceLedger(self.event_log)
        self.pricing = TierPricingPolicy(settings.tiers)
        self.fee_account = fee_account if fee_account is not None else FeeAccount()
        self.funds = funds
        self.price_feed = PriceFeedClient(
            oracle_address=settings.oracle.oracle_address,
            channel=channel,
            fee_account=self.fee_account,
            event_log=self.event_log,
            query_delay_seconds=settings.oracle.query_delay_seconds,
            clock=clock,
        )
        self.processor = SaleTransactionProcessor(
            ledger=self.ledger,
            pricing=self.pricing,
            rate_source=self.price_feed,
            funds=self.funds,
            beneficiary=self.beneficiary,
        )
        self.bulk_exchange = BulkExchange(self.ledger)

        with self._transaction():
            if settings.initial_supply:
                self.ledger.mint(self.beneficiary, settings.initial_supply)
            self.price_feed.update(0)

        logger.info(
            "PreSaleToken created: owner=%s supply=%d oracle=%s",
            self.owner,
            settings.initial_supply,
            settings.oracle.oracle_address,
        )

    # -------------------------------------------------------------------------
    # Чтение
    # -------------------------------------------------------------------------

    def balance_of(self, holder: str) -> int:
        return self.ledger.balance_of(holder)

    @property
    def total_supply(self) -> int:
        return self.ledger.total_supply

    @property
    def tiers(self) -> Tuple[Tier, ...]:
        return self.pricing.tiers

    def current_rate(self) -> int:
        return self.price_feed.current_rate()

    @property
    def events(self) -> Tuple[Event, ...]:
        return self.event_log.events

    def burn_events(self) -> List[BurnEvent]:
        return self.event_log.of_type(BurnEvent)

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        with self._transaction():
            return self.ledger.transfer(caller, to, amount)

    def burn(self, caller: str, amount: int) -> BurnEvent:
        with self._transaction():
            return self.ledger.burn(caller, amount)

    # -------------------------------------------------------------------------
    # Продажа
    # -------------------------------------------------------------------------

    def receive_payment(self, payer: str, value: int) -> SaleReceipt:
        """Входящий платёж (default receiver)."""
        with self._transaction():
            return self.processor.process_payment(payer, value)

    # -------------------------------------------------------------------------
    # Price feed
    # -------------------------------------------------------------------------

    def fund_queries(self, amount: int) -> int:
        """Пополнение средств для оплаты запросов к оракулу."""
        with self._transaction():
            self.fee_account.deposit(amount)
            return self.fee_account.balance

    def update(self, delay_seconds: int = 0) -> QueryOutcome:
        with self._transaction():
            return self.price_feed.update(delay_seconds)

    def oracle_callback(
        self,
        sender: str,
        query_id: str,
        result: str,
        proof: Optional[bytes] = None,
    ) -> PriceFeedUpdate:
        with self._transaction():
            return self.price_feed.handle_callback(sender, query_id, result, proof)

    # -------------------------------------------------------------------------
    # Owner
    # -------------------------------------------------------------------------

    def exchange_to_ico(
        self, caller: str, target: ExternalTokenContract, multiplier: int
    ) -> BulkExchangeReport:
        """Owner-only перенос всех балансов во внешний контракт (без отката)."""
        self._require_alive()
        self._require_owner(caller, "exchange_to_ico")
        return self.bulk_exchange.run(target, multiplier)

    def set_owner(self, caller: str, new_owner: str) -> None:
        with self._transaction():
            self._require_owner(caller, "set_owner")
            if not new_owner:
                raise ValueError("new_owner must be non-empty")
            logger.info("Owner changed: %s -> %s", self.owner, new_owner)
            self.owner = new_owner

    def kill(self, caller: str) -> int:
        """Уничтожение контракта; остаток fee account уходит владельцу."""
        with self._transaction():
            self._require_owner(caller, "kill")
            remaining = self.fee_account.balance
            self.fee_account.charge(remaining)
            self.funds.send(self.owner, remaining)
            self.destroyed = True
            logger.info("Contract destroyed by %s, released %d", caller, remaining)
            return remaining

    # -------------------------------------------------------------------------
    # Снапшот состояния
    # -------------------------------------------------------------------------

    def state_snapshot(self) -> SaleStateSnapshot:
        """Снапшот персистентного состояния, проверенный JSON Schema."""
        snapshot = SaleStateSnapshot(
            schema_version=SALE_STATE_SCHEMA_VERSION,
            owner=self.owner,
            beneficiary=self.beneficiary,
            destroyed=self.destroyed,
            total_supply=self.ledger.total_supply,
            balances=[
                HolderBalance(holder=h, balance=b)
                for h, b in self.ledger.balances().items()
            ],
            holder_index=list(self.ledger.holder_index),
            tiers=list(self.pricing.tiers),
            price_feed=PriceFeed(
                state=self.price_feed.state,
                rate_cents=self.price_feed.current_rate(),
                oracle_address=self.price_feed.oracle_address,
                pending_queries=list(self.price_feed.pending_queries),
                last_updated_at=self.price_feed.last_updated_at,
            ),
        )
        validate_sale_state(snapshot.model_dump(mode="json"))
        return snapshot

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        self._require_alive()
        participants = [
            self,
            self.ledger,
            self.pricing,
            self.price_feed,
            self.fee_account,
            self.event_log,
        ]
        if isinstance(self.funds, Snapshotable):
            participants.append(self.funds)
        with atomic(*participants):
            yield

    def _require_alive(self) -> None:
        if self.destroyed:
            raise ContractDestroyed("Contract has been destroyed")

    def _require_owner(self, caller: str, operation: str) -> None:
        if caller != self.owner:
            raise Unauthorized(caller, operation)

    def snapshot(self) -> Tuple[str, bool]:
        return self.owner, self.destroyed

    def restore(self, state: Tuple[str, bool]) -> None:
        self.owner, self.destroyed = state
