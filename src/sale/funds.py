"""Funds gateway — исходящие переводы базовой валюты (proceeds, refund)."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Protocol, Set, Tuple, runtime_checkable

from src.core.domain.errors import TransferFailed
from src.core.domain.units import validate_amount

logger = logging.getLogger(__name__)


@runtime_checkable
class FundsGateway(Protocol):
    """Отправка средств получателю.

    Любой вызов может привести к reentry; вызывается только после
    фиксации внутреннего состояния.
    """

    def send(self, recipient: str, amount: int) -> None:
        """Raises TransferFailed, если перевод не может быть доставлен."""
        ...


@dataclass(frozen=True)
class Payout:
    """Выполненный исходящий перевод."""

    recipient: str
    amount: int


class InMemoryFundsGateway:
    """Gateway, накапливающий полученные суммы по получателям."""

    def __init__(self):
        self._received: Dict[str, int] = {}
        self._payouts: List[Payout] = []
        self._rejecting: Set[str] = set()

    def reject(self, recipient: str) -> None:
        """Получатель начинает отказываться от переводов."""
        self._rejecting.add(recipient)

    def accept(self, recipient: str) -> None:
        self._rejecting.discard(recipient)

    def send(self, recipient: str, amount: int) -> None:
        validate_amount(amount)
        if recipient in self._rejecting:
            raise TransferFailed(recipient, amount)
        self._received[recipient] = self._received.get(recipient, 0) + amount
        self._payouts.append(Payout(recipient=recipient, amount=amount))
        logger.debug("Sent %d to %s", amount, recipient)

    def received(self, recipient: str) -> int:
        return self._received.get(recipient, 0)

    @property
    def payouts(self) -> Tuple[Payout, ...]:
        return tuple(self._payouts)

    def snapshot(self) -> Tuple[Dict[str, int], int]:
        return dict(self._received), len(self._payouts)

    def restore(self, state: Tuple[Dict[str, int], int]) -> None:
        received, payout_count = state
        self._received = dict(received)
        del self._payouts[payout_count:]
