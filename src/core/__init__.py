"""
Core domain models, integer math primitives, and invariants.

This module contains the foundational building blocks that are independent
of external systems (oracle network, payment rails, external token contracts).
"""
