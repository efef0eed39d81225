"""
Events — Наблюдаемые уведомления контракта

Кроме чтения балансов, внешне видны только:
- BurnEvent (holder, amount)
- PriceFeedNotice (текстовые статусы price feed: query sent / query skipped)

EventLog участвует в atomic(): события отменённого вызова откатываются
вместе с состоянием.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Type, TypeVar, Union


class NoticeKind(str, Enum):
    """Тип статуса price feed."""

    QUERY_SENT = "QUERY_SENT"
    QUERY_SKIPPED = "QUERY_SKIPPED"


@dataclass(frozen=True)
class BurnEvent:
    """Уведомление о сжигании токенов."""

    holder: str
    amount: int


@dataclass(frozen=True)
class PriceFeedNotice:
    """Статус price feed (human-readable)."""

    kind: NoticeKind
    message: str
    query_id: Optional[str] = None


Event = Union[BurnEvent, PriceFeedNotice]
E = TypeVar("E", BurnEvent, PriceFeedNotice)


class EventLog:
    """Упорядоченный журнал событий."""

    def __init__(self):
        self._events: List[Event] = []

    def emit(self, event: Event) -> Event:
        self._events.append(event)
        return event

    @property
    def events(self) -> Tuple[Event, ...]:
        return tuple(self._events)

    def of_type(self, event_type: Type[E]) -> List[E]:
        """Все события заданного типа в порядке эмиссии."""
        return [e for e in self._events if isinstance(e, event_type)]

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, state: int) -> None:
        del self._events[state:]

    def __len__(self) -> int:
        return len(self._events)
