"""Sale — обработка платежей и внешняя поверхность pre-sale контракта."""

from .funds import FundsGateway, InMemoryFundsGateway, Payout
from .processor import RateSource, SaleReceipt, SaleTransactionProcessor
from .token_sale import SALE_STATE_SCHEMA_VERSION, PreSaleToken

__all__ = [
    "PreSaleToken",
    "SALE_STATE_SCHEMA_VERSION",
    "SaleTransactionProcessor",
    "SaleReceipt",
    "RateSource",
    "FundsGateway",
    "InMemoryFundsGateway",
    "Payout",
]
