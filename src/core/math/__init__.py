"""
Core math modules для pre-sale движка

Целочисленные примитивы uint256 без float и без молчаливого переполнения.
"""

from src.core.math.safe_uint import (
    checked_add,
    checked_mul,
    checked_sub,
)

__all__ = [
    "checked_add",
    "checked_sub",
    "checked_mul",
]
