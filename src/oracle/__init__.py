"""Oracle — price feed клиента и канал запросов к оракулу.

- UNINITIALIZED → ACTIVE после первого аутентифицированного callback
- Повторный запрос через 1 час после каждого callback
- Нехватка средств на fee → notice вместо запроса
"""

from .channel import FeeAccount, InMemoryOracleChannel, OracleRequest, OracleRequestChannel
from .price_feed import (
    QUERY_SENT_MESSAGE,
    QUERY_SKIPPED_MESSAGE,
    PriceFeedClient,
    PriceFeedSnapshot,
    PriceFeedUpdate,
    QueryOutcome,
)

__all__ = [
    "PriceFeedClient",
    "PriceFeedUpdate",
    "PriceFeedSnapshot",
    "QueryOutcome",
    "QUERY_SENT_MESSAGE",
    "QUERY_SKIPPED_MESSAGE",
    "OracleRequestChannel",
    "OracleRequest",
    "InMemoryOracleChannel",
    "FeeAccount",
]
