"""Exchange — owner-only перенос балансов во внешний токен-контракт."""

from .bulk_exchange import (
    BulkExchange,
    BulkExchangeReport,
    ExchangeCredit,
    ExternalTokenContract,
    InMemoryTokenContract,
)

__all__ = [
    "BulkExchange",
    "BulkExchangeReport",
    "ExchangeCredit",
    "ExternalTokenContract",
    "InMemoryTokenContract",
]
