"""Price Feed Client — курс базовой валюты в USD cents от внешнего оракула.

Состояния:
- UNINITIALIZED: rate == 0, продажа отключена
- ACTIVE: rate > 0, обновляется по callback

Переходы:
- Создание контракта → немедленный update(0)
- Аутентифицированный callback → установка курса + update(QUERY_DELAY_SECONDS)
  (единственный источник периодического обновления, отдельного таймера нет)
- Недостаток средств на fee → запрос пропускается, эмитится notice
- Callback не от адреса оракула → UnauthorizedCallback, курс не меняется

Проверки устаревания курса нет: старый курс действует до перезаписи.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Set, Tuple

from jsonschema import ValidationError

from src.core.contracts import oracle_callback_errors, validate_oracle_callback
from src.core.domain.errors import InvalidPriceResult, UnauthorizedCallback
from src.core.domain.events import EventLog, NoticeKind, PriceFeedNotice
from src.core.domain.sale_state import PriceFeedState
from src.core.domain.units import (
    QUERY_DELAY_SECONDS,
    UINT256_MAX,
    parse_price_result,
    validate_amount,
)
from src.oracle.channel import FeeAccount, OracleRequestChannel

logger = logging.getLogger(__name__)

QUERY_SENT_MESSAGE = "Price query was sent, standing by for the answer.."
QUERY_SKIPPED_MESSAGE = "Price query was NOT sent, please add funds to cover the query fee"


@dataclass(frozen=True)
class QueryOutcome:
    """Результат update(delay)."""

    sent: bool
    query_id: Optional[str]
    fee: int
    delay_seconds: int
    notice: PriceFeedNotice


@dataclass(frozen=True)
class PriceFeedUpdate:
    """Результат обработки callback."""

    new_state: PriceFeedState
    previous_state: PriceFeedState
    rate_cents: int
    previous_rate_cents: int

    # Диагностика
    transition_occurred: bool
    query_id: str
    known_query: bool
    next_query: QueryOutcome


@dataclass(frozen=True)
class PriceFeedSnapshot:
    """Снапшот price feed для atomic()."""

    rate_cents: int
    pending_queries: Tuple[str, ...]
    last_updated_at: Optional[float]


class PriceFeedClient:
    """Клиент price feed: outbound канал запросов + inbound callback handler.

    Процессор продажи только читает current_rate() и никогда не управляет
    клиентом напрямую.
    """

    def __init__(
        self,
        oracle_address: str,
        channel: OracleRequestChannel,
        fee_account: Optional[FeeAccount] = None,
        event_log: Optional[EventLog] = None,
        query_delay_seconds: int = QUERY_DELAY_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            oracle_address: единственный доверенный отправитель callback
            channel: канал запросов к оракулу
            fee_account: средства контракта для оплаты запросов
            event_log: журнал для PriceFeedNotice
            query_delay_seconds: задержка повторного запроса после callback
            clock: источник времени для last_updated_at
        """
        if not oracle_address:
            raise ValueError("oracle_address must be non-empty")
        self.oracle_address = oracle_address
        self.channel = channel
        self.fee_account = fee_account if fee_account is not None else FeeAccount()
        self.event_log = event_log if event_log is not None else EventLog()
        self.query_delay_seconds = validate_amount(query_delay_seconds, "query_delay_seconds")
        self._clock = clock

        self._rate_cents = 0
        self._pending: Set[str] = set()
        self._last_updated_at: Optional[float] = None

    # -------------------------------------------------------------------------
    # Чтение
    # -------------------------------------------------------------------------

    def current_rate(self) -> int:
        """Текущий курс (cents за единицу); 0 — не инициализирован."""
        return self._rate_cents

    @property
    def state(self) -> PriceFeedState:
        if self._rate_cents == 0:
            return PriceFeedState.UNINITIALIZED
        return PriceFeedState.ACTIVE

    @property
    def pending_queries(self) -> Tuple[str, ...]:
        return tuple(sorted(self._pending))

    @property
    def last_updated_at(self) -> Optional[float]:
        return self._last_updated_at

    # -------------------------------------------------------------------------
    # Outbound
    # -------------------------------------------------------------------------

    def update(self, delay_seconds: int = 0) -> QueryOutcome:
        """Отправка запроса цены или notice о нехватке средств.

        Никогда не падает из-за нехватки средств: degraded, но не фатально.
        """
        validate_amount(delay_seconds, "delay_seconds")
        fee = self.channel.query_fee()

        if not self.fee_account.can_cover(fee):
            notice = self.event_log.emit(
                PriceFeedNotice(kind=NoticeKind.QUERY_SKIPPED, message=QUERY_SKIPPED_MESSAGE)
            )
            logger.warning(
                "Price query skipped: fee %d exceeds available funds %d",
                fee,
                self.fee_account.balance,
            )
            return QueryOutcome(
                sent=False, query_id=None, fee=fee, delay_seconds=delay_seconds, notice=notice
            )

        self.fee_account.charge(fee)
        query_id = self.channel.send_query(delay_seconds)
        self._pending.add(query_id)
        notice = self.event_log.emit(
            PriceFeedNotice(kind=NoticeKind.QUERY_SENT, message=QUERY_SENT_MESSAGE, query_id=query_id)
        )
        logger.info("Price query %s sent (delay=%ds, fee=%d)", query_id, delay_seconds, fee)
        return QueryOutcome(
            sent=True, query_id=query_id, fee=fee, delay_seconds=delay_seconds, notice=notice
        )

    # -------------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------------

    def handle_callback(
        self,
        sender: str,
        query_id: str,
        result: str,
        proof: Optional[bytes] = None,
    ) -> PriceFeedUpdate:
        """Обработка callback оракула.

        Raises:
            UnauthorizedCallback: sender != oracle_address
            ValidationError: payload нарушает oracle_callback.json
            InvalidPriceResult: result не разбирается в положительный курс
        """
        if sender != self.oracle_address:
            logger.warning("Rejected price callback from untrusted sender %s", sender)
            raise UnauthorizedCallback(sender)

        payload = {
            "query_id": query_id,
            "result": result,
            "proof": proof.hex() if proof else None,
        }
        try:
            validate_oracle_callback(payload)
        except ValidationError:
            logger.warning(
                "Rejected malformed price callback %s: %s",
                query_id,
                "; ".join(oracle_callback_errors(payload)),
            )
            raise

        try:
            rate_cents = parse_price_result(result)
        except ValueError as e:
            raise InvalidPriceResult(str(e)) from e
        if rate_cents == 0:
            raise InvalidPriceResult(f"Price result must be positive: {result!r}")
        if rate_cents > UINT256_MAX:
            raise InvalidPriceResult(f"Price result exceeds uint256 range: {result!r}")

        known_query = query_id in self._pending
        if not known_query:
            logger.warning("Price callback for unknown query id %s", query_id)
        self._pending.discard(query_id)

        previous_state = self.state
        previous_rate = self._rate_cents
        self._rate_cents = rate_cents
        self._last_updated_at = self._clock()
        logger.info("Exchange rate updated: %d -> %d cents", previous_rate, rate_cents)

        next_query = self.update(self.query_delay_seconds)

        return PriceFeedUpdate(
            new_state=self.state,
            previous_state=previous_state,
            rate_cents=rate_cents,
            previous_rate_cents=previous_rate,
            transition_occurred=previous_state != self.state,
            query_id=query_id,
            known_query=known_query,
            next_query=next_query,
        )

    # -------------------------------------------------------------------------
    # Atomic participant
    # -------------------------------------------------------------------------

    def snapshot(self) -> PriceFeedSnapshot:
        return PriceFeedSnapshot(
            rate_cents=self._rate_cents,
            pending_queries=tuple(self._pending),
            last_updated_at=self._last_updated_at,
        )

    def restore(self, state: PriceFeedSnapshot) -> None:
        self._rate_cents = state.rate_cents
        self._pending = set(state.pending_queries)
        self._last_updated_at = state.last_updated_at
