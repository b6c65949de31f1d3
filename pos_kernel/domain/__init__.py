"""
Pure domain layer.

Money value objects and Decimal helpers with NO dependencies on I/O,
clocks or configuration. All objects are immutable and deterministic.
"""

from pos_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from pos_kernel.domain.values import (
    HUNDRED,
    MONEY_DECIMAL_PLACES,
    ZERO,
    Currency,
    Money,
    clamp_percent,
    percent_of,
    round_money,
    round_to_whole,
    safe_divide,
    to_decimal,
)

__all__ = [
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "HUNDRED",
    "MONEY_DECIMAL_PLACES",
    "ZERO",
    "clamp_percent",
    "percent_of",
    "round_money",
    "round_to_whole",
    "safe_divide",
    "to_decimal",
]
