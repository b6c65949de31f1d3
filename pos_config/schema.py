"""
Invoice settings schema.

``InvoiceSettings`` is the only runtime configuration artifact. It is
passed explicitly into the invoice aggregate and the payload builder;
nothing reads configuration from module globals.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from enum import Enum
from typing import Any, Self

from pos_kernel.domain.currency import CurrencyRegistry
from pos_kernel.domain.values import HUNDRED, ZERO, to_decimal
from pos_kernel.exceptions import InvalidSettingsError
from pos_kernel.logging_config import get_logger

logger = get_logger("config.schema")


class PaymentStatus(str, Enum):
    """Payment state recorded on an invoice."""

    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"
    DRAFT = "draft"


class PaymentMode(str, Enum):
    """How the customer paid."""

    CASH = "cash"
    BANK = "bank"  # Bank transfer; carries a UTR number
    CARD = "card"


@dataclass(frozen=True)
class InvoiceSettings:
    """
    Settings for one vendor's invoice editing sessions.

    Field defaults match the dashboard's behaviour. Override from YAML via
    ``pos_config.get_active_settings()`` or directly:

        settings = InvoiceSettings(currency="USD", round_off_enabled=True)
    """

    currency: str = "INR"

    # Whole-unit round-off of the grand total
    round_off_enabled: bool = False

    # Defaults for newly added lines
    default_tax_inclusive: bool = False
    max_discount_percent: Decimal = HUNDRED

    # Payment defaults
    default_payment_status: PaymentStatus = PaymentStatus.PENDING
    default_payment_mode: PaymentMode = PaymentMode.CASH
    omit_cash_payment_mode: bool = True

    # Display
    suppress_zero_rate_in_breakdown: bool = True

    def __post_init__(self):
        code = self.currency.upper().strip() if isinstance(self.currency, str) else ""
        if not CurrencyRegistry.is_valid(code):
            raise InvalidSettingsError("currency", f"unknown currency code {self.currency!r}")
        object.__setattr__(self, "currency", code)

        try:
            max_discount = to_decimal(self.max_discount_percent)
        except ValueError as e:
            raise InvalidSettingsError("max_discount_percent", str(e)) from e
        if max_discount < ZERO or max_discount > HUNDRED:
            raise InvalidSettingsError(
                "max_discount_percent", f"must be between 0 and 100, got {max_discount}"
            )
        object.__setattr__(self, "max_discount_percent", max_discount)

        try:
            object.__setattr__(
                self, "default_payment_status", PaymentStatus(self.default_payment_status)
            )
        except ValueError as e:
            raise InvalidSettingsError(
                "default_payment_status", f"unknown status {self.default_payment_status!r}"
            ) from e
        try:
            object.__setattr__(
                self, "default_payment_mode", PaymentMode(self.default_payment_mode)
            )
        except ValueError as e:
            raise InvalidSettingsError(
                "default_payment_mode", f"unknown mode {self.default_payment_mode!r}"
            ) from e

        for name in (
            "round_off_enabled",
            "default_tax_inclusive",
            "omit_cash_payment_mode",
            "suppress_zero_rate_in_breakdown",
        ):
            if not isinstance(getattr(self, name), bool):
                raise InvalidSettingsError(name, "must be a boolean")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create settings with the dashboard defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create settings from a dictionary (e.g. a parsed YAML document)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidSettingsError(unknown[0], "unknown setting")
        logger.debug(
            "invoice_settings_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "round_off_enabled": self.round_off_enabled,
            "default_tax_inclusive": self.default_tax_inclusive,
            "max_discount_percent": str(self.max_discount_percent),
            "default_payment_status": self.default_payment_status.value,
            "default_payment_mode": self.default_payment_mode.value,
            "omit_cash_payment_mode": self.omit_cash_payment_mode,
            "suppress_zero_rate_in_breakdown": self.suppress_zero_rate_in_breakdown,
        }
