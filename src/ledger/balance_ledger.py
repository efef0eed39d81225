"""
Balance Ledger — балансы держателей и holder index

Инварианты:
1. Сумма балансов меняется только через mint (начальная эмиссия) и burn/zero
2. transfer сохраняет сумму балансов
3. Баланс никогда не становится отрицательным (InsufficientBalance)
4. Баланс никогда не превышает UINT256_MAX (Overflow)
5. Holder index — append-only список: держатель добавляется каждый раз,
   когда получает токены при нулевом балансе, поэтому возможны дубликаты
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from src.core.domain.errors import InsufficientBalance
from src.core.domain.events import BurnEvent, EventLog
from src.core.domain.units import validate_amount
from src.core.math.safe_uint import checked_add, checked_sub

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerState:
    """Снапшот ledger для atomic()."""

    balances: Dict[str, int]
    holder_index: Tuple[str, ...]
    total_supply: int


class BalanceLedger:
    """Ledger балансов токенов с holder index.

    Явный сервис (не ambient state): принадлежит процессору продажи и
    подменяется в тестах.
    """

    def __init__(self, event_log: Optional[EventLog] = None):
        self.event_log = event_log if event_log is not None else EventLog()
        self._balances: Dict[str, int] = {}
        self._holder_index: List[str] = []
        self._total_supply = 0

    # -------------------------------------------------------------------------
    # Чтение
    # -------------------------------------------------------------------------

    def balance_of(self, holder: str) -> int:
        """Текущий баланс; 0 для неизвестного держателя."""
        return self._balances.get(holder, 0)

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def holder_index(self) -> Tuple[str, ...]:
        """Holder index как есть, с дубликатами."""
        return tuple(self._holder_index)

    def unique_holders(self) -> List[str]:
        """Holder index без дубликатов, в порядке первого появления."""
        return list(dict.fromkeys(self._holder_index))

    def balances(self) -> Dict[str, int]:
        """Ненулевые балансы."""
        return {h: b for h, b in self._balances.items() if b > 0}

    # -------------------------------------------------------------------------
    # Изменение
    # -------------------------------------------------------------------------

    def mint(self, to: str, amount: int) -> None:
        """Начальная эмиссия токенов держателю.

        Raises:
            Overflow: Если баланс или total supply превысит UINT256_MAX
        """
        validate_amount(amount)
        new_supply = checked_add(self._total_supply, amount)
        self._credit(to, amount)
        self._total_supply = new_supply
        logger.info("Minted %d tokens to %s", amount, to)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Перевод токенов между держателями.

        Raises:
            InsufficientBalance: Если balance[sender] < amount
            Overflow: Если баланс получателя превысит UINT256_MAX
        """
        validate_amount(amount)
        sender_balance = self.balance_of(sender)
        if sender_balance < amount:
            raise InsufficientBalance(sender, sender_balance, amount)

        if sender == to:
            return True

        # Проверка переполнения до любых изменений
        checked_add(self.balance_of(to), amount)

        self._balances[sender] = checked_sub(sender_balance, amount)
        self._credit(to, amount)
        logger.debug("Transfer %d tokens %s -> %s", amount, sender, to)
        return True

    def burn(self, holder: str, amount: int) -> BurnEvent:
        """Сжигание токенов держателя. Сожжённое навсегда уходит из supply.

        Raises:
            InsufficientBalance: Если баланса не хватает
        """
        validate_amount(amount)
        balance = self.balance_of(holder)
        if balance < amount:
            raise InsufficientBalance(holder, balance, amount)

        new_supply = checked_sub(self._total_supply, amount)
        self._balances[holder] = checked_sub(balance, amount)
        self._total_supply = new_supply
        event = BurnEvent(holder=holder, amount=amount)
        self.event_log.emit(event)
        logger.info("Burned %d tokens of %s", amount, holder)
        return event

    def zero(self, holder: str) -> int:
        """Обнуление баланса (bulk exchange). Возвращает прежний баланс."""
        balance = self.balance_of(holder)
        if balance:
            self._total_supply = checked_sub(self._total_supply, balance)
            self._balances[holder] = 0
        return balance

    def _credit(self, to: str, amount: int) -> None:
        balance = self.balance_of(to)
        new_balance = checked_add(balance, amount)
        if balance == 0 and amount > 0:
            self._holder_index.append(to)
        self._balances[to] = new_balance

    # -------------------------------------------------------------------------
    # Atomic participant
    # -------------------------------------------------------------------------

    def snapshot(self) -> LedgerState:
        return LedgerState(
            balances=dict(self._balances),
            holder_index=tuple(self._holder_index),
            total_supply=self._total_supply,
        )

    def restore(self, state: LedgerState) -> None:
        self._balances = dict(state.balances)
        self._holder_index = list(state.holder_index)
        self._total_supply = state.total_supply
