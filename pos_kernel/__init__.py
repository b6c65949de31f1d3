"""
POS Kernel - money arithmetic, typed errors and structured logging for
the vendor invoicing core.

- Decimal-only money with explicit ROUND_HALF_UP rounding
- Typed exceptions with machine-readable codes
- JSON structured logging with session-scoped context
"""

__version__ = "0.1.0"
