"""Ledger — балансы держателей токенов.

- transfer / burn / balance_of с проверками достаточности и переполнения
- append-only holder index (возможны дубликаты)
"""

from .balance_ledger import BalanceLedger, LedgerState

__all__ = [
    "BalanceLedger",
    "LedgerState",
]
