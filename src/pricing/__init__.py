"""Pricing — тировое ценообразование pre-sale.

- Три тира с фиксированной ценой, по возрастанию цены
- Без back-fill: дорогие тиры не доливаются дешёвыми
"""

from .tier_policy import TierFill, TierPricingPolicy, TierQuote

__all__ = [
    "TierPricingPolicy",
    "TierQuote",
    "TierFill",
]
