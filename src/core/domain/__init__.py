"""
Domain models and value objects.

Contains fundamental domain entities like Tier, events, errors, unit conversions.
"""

from src.core.domain.errors import (
    BulkExchangeInterrupted,
    ContractDestroyed,
    InsufficientBalance,
    InvalidPriceResult,
    NothingPurchasable,
    Overflow,
    PresaleError,
    RateUninitialized,
    TransferFailed,
    Unauthorized,
    UnauthorizedCallback,
)
from src.core.domain.events import BurnEvent, EventLog, NoticeKind, PriceFeedNotice
from src.core.domain.sale_state import (
    HolderBalance,
    PriceFeed,
    PriceFeedState,
    SaleStateSnapshot,
)
from src.core.domain.tier import DEFAULT_TIERS, TIER_COUNT, Tier
from src.core.domain.units import (
    ONE_UNIT,
    PRICE_RESULT_DECIMALS,
    QUERY_DELAY_SECONDS,
    UINT256_MAX,
    cents_to_value,
    parse_price_result,
    validate_amount,
    value_to_cents,
)

__all__ = [
    # Units module
    "ONE_UNIT",
    "UINT256_MAX",
    "QUERY_DELAY_SECONDS",
    "PRICE_RESULT_DECIMALS",
    "validate_amount",
    "value_to_cents",
    "cents_to_value",
    "parse_price_result",
    # Errors
    "PresaleError",
    "InsufficientBalance",
    "Overflow",
    "RateUninitialized",
    "NothingPurchasable",
    "UnauthorizedCallback",
    "InvalidPriceResult",
    "Unauthorized",
    "TransferFailed",
    "ContractDestroyed",
    "BulkExchangeInterrupted",
    # Tier model
    "Tier",
    "TIER_COUNT",
    "DEFAULT_TIERS",
    # Events
    "BurnEvent",
    "PriceFeedNotice",
    "NoticeKind",
    "EventLog",
    # Sale state model
    "SaleStateSnapshot",
    "HolderBalance",
    "PriceFeed",
    "PriceFeedState",
]
