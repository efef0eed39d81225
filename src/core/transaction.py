"""
Atomic scope — all-or-nothing исполнение вызова

Каждый изменяющий вызов контракта выполняется внутри atomic(): участники
(ledger, тиры, funds gateway, event log, ...) сохраняют снапшот до вызова и
восстанавливаются в обратном порядке, если вызов завершился исключением.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Snapshotable(Protocol):
    """Участник atomic scope."""

    def snapshot(self) -> Any:
        ...

    def restore(self, state: Any) -> None:
        ...


@contextmanager
def atomic(*participants: Snapshotable) -> Iterator[None]:
    """
    All-or-nothing scope.

    При исключении внутри блока все участники восстанавливаются из снапшотов
    (в обратном порядке), исключение пробрасывается дальше.

    Args:
        participants: объекты с snapshot()/restore(state)
    """
    saved = [(p, p.snapshot()) for p in participants]
    try:
        yield
    except BaseException as exc:
        for participant, state in reversed(saved):
            participant.restore(state)
        logger.debug(
            "Rolled back %d participants after %s", len(saved), type(exc).__name__
        )
        raise
