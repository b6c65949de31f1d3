"""
Module: pos_engines
Responsibility:
    Package entrypoint re-exporting the pure invoice calculation engines.
    This is the canonical import surface for pos_invoicing.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import pos_kernel (and sibling engine modules).
    MUST NOT import pos_invoicing or pos_config.

Invariants enforced:
    - Decimal-only arithmetic: all monetary amounts use ``Money``; floats
      never enter a calculation.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from pos_engines.line_item import calculate_line
    from pos_engines.tax_breakdown import build_tax_breakdown
    from pos_engines.sales_price import calculate_sales_price
"""

from pos_kernel.logging_config import get_logger

logger = get_logger("engines")

from pos_engines.line_item import (
    LineCalculation,
    calculate_line,
    calculate_tax,
    derive_percent,
)
from pos_engines.sales_price import (
    SalesPriceResult,
    calculate_sales_price,
)
from pos_engines.tax_breakdown import (
    TaxBreakdown,
    TaxGroup,
    build_tax_breakdown,
)

__all__ = [
    # Line item
    "LineCalculation",
    "calculate_line",
    "calculate_tax",
    "derive_percent",
    # Tax breakdown
    "TaxBreakdown",
    "TaxGroup",
    "build_tax_breakdown",
    # Sales price
    "SalesPriceResult",
    "calculate_sales_price",
]
