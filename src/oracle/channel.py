"""Oracle channel — исходящий канал запросов цены и fee account.

Сетевые механики оракула и проверка proof — внешний коллаборатор.
Здесь только интерфейс канала, in-memory реализация для симуляций/тестов
и учёт средств контракта, из которых оплачиваются запросы.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import List, Protocol, runtime_checkable

from src.core.domain.units import validate_amount

logger = logging.getLogger(__name__)


@runtime_checkable
class OracleRequestChannel(Protocol):
    """Исходящий канал запросов к оракулу."""

    def query_fee(self) -> int:
        """Текущая плата за один запрос (wei)."""
        ...

    def send_query(self, delay_seconds: int) -> str:
        """Отправка запроса цены; возвращает query id. Не блокирует."""
        ...


@dataclass(frozen=True)
class OracleRequest:
    """Отправленный запрос."""

    query_id: str
    delay_seconds: int
    datasource: str
    query: str


class InMemoryOracleChannel:
    """Канал, записывающий запросы вместо отправки в сеть.

    Query id последовательные: "q-1", "q-2", ...
    """

    def __init__(self, fee: int = 0, datasource: str = "URL", query: str = "ETHUSD"):
        self.fee = validate_amount(fee, "fee")
        self.datasource = datasource
        self.query = query
        self.requests: List[OracleRequest] = []
        self._ids = itertools.count(1)

    def query_fee(self) -> int:
        return self.fee

    def send_query(self, delay_seconds: int) -> str:
        request = OracleRequest(
            query_id=f"q-{next(self._ids)}",
            delay_seconds=delay_seconds,
            datasource=self.datasource,
            query=self.query,
        )
        self.requests.append(request)
        logger.debug("Recorded oracle request %s (delay=%ds)", request.query_id, delay_seconds)
        return request.query_id

    @property
    def last_request(self) -> OracleRequest:
        return self.requests[-1]


class FeeAccount:
    """Средства контракта для оплаты запросов к оракулу.

    Общий пул без резервирования: недостаток средств не фатален,
    запрос просто пропускается.
    """

    def __init__(self, balance: int = 0):
        self._balance = validate_amount(balance, "balance")

    @property
    def balance(self) -> int:
        return self._balance

    def deposit(self, amount: int) -> None:
        validate_amount(amount)
        self._balance += amount

    def can_cover(self, fee: int) -> bool:
        return self._balance >= fee

    def charge(self, fee: int) -> None:
        validate_amount(fee, "fee")
        if fee > self._balance:
            raise ValueError(f"Fee {fee} exceeds available funds {self._balance}")
        self._balance -= fee

    def snapshot(self) -> int:
        return self._balance

    def restore(self, state: int) -> None:
        self._balance = state
