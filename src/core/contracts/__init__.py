"""
Contract Validation Module

JSON Schema контракты снапшота продажи и callback оракула.
"""

from .validators import (
    ContractValidator,
    OracleCallbackValidator,
    SaleStateValidator,
    SchemaLoader,
    oracle_callback_errors,
    validate_oracle_callback,
    validate_sale_state,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "SaleStateValidator",
    "OracleCallbackValidator",
    # Functions
    "validate_sale_state",
    "validate_oracle_callback",
    "oracle_callback_errors",
]
