"""
Invoice Domain Models (``pos_invoicing.models``).

Responsibility
--------------
Frozen value objects for the nouns of an invoice editing session: the
``LineItem``, the recomputed ``InvoiceTotals`` and the ``InvoiceState``
of the aggregate.

Architecture position
---------------------
**Invoicing layer** -- pure data definitions with ZERO I/O. A ``LineItem``
derives its amounts through ``pos_engines.line_item`` at construction, so
a line can never be observed with stale figures.

Invariants enforced
-------------------
* ``LineItem.quantity >= 1``, ``unit_price >= 0``,
  ``discount_percent`` in ``[0, 100]``, ``tax_rate_percent >= 0``.
* All monetary fields use ``Money`` -- NEVER ``float``.
* ``InvoiceTotals.taxable_amount == subtotal_gross - total_discount`` and
  ``grand_total_raw == taxable_amount + total_tax`` by construction,
  less any tax already embedded in tax-inclusive prices.

Failure modes
-------------
* ``InvalidQuantityError``, ``InvalidPriceError``,
  ``InvalidDiscountPercentError``, ``InvalidTaxRateError`` on construction
  with out-of-range inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum

from pos_engines.line_item import LineCalculation, calculate_line
from pos_engines.tax_breakdown import TaxBreakdown
from pos_kernel.domain.values import HUNDRED, ZERO, Currency, Money, to_decimal
from pos_kernel.exceptions import (
    InvalidDiscountPercentError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidTaxRateError,
)
from pos_kernel.logging_config import get_logger

logger = get_logger("invoicing.models")


class InvoiceState(Enum):
    """Aggregate lifecycle states."""
    EMPTY = "empty"
    POPULATED = "populated"


@dataclass(frozen=True)
class LineItem:
    """
    One row of the invoice.

    ``unit_price`` and ``tax_rate_percent`` are snapshots taken from the
    product when the line was added; ``discount_percent`` is the durable
    input and the discount amount is always re-derived from it.
    """

    line_id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: Money
    discount_percent: Decimal = ZERO
    tax_rate_percent: Decimal = ZERO
    tax_inclusive: bool = False
    product_sku: str | None = None

    calculation: LineCalculation = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidQuantityError(self.quantity, self.product_id)
        if self.quantity < 1:
            raise InvalidQuantityError(self.quantity, self.product_id)
        if self.unit_price.is_negative:
            raise InvalidPriceError(self.product_id, str(self.unit_price.amount))

        discount_percent = to_decimal(self.discount_percent)
        if discount_percent < ZERO or discount_percent > HUNDRED:
            raise InvalidDiscountPercentError(str(discount_percent))
        tax_rate = to_decimal(self.tax_rate_percent)
        if tax_rate < ZERO:
            raise InvalidTaxRateError(str(tax_rate), self.product_id)

        object.__setattr__(self, "discount_percent", discount_percent)
        object.__setattr__(self, "tax_rate_percent", tax_rate)
        object.__setattr__(self, "calculation", calculate_line(
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount_percent=discount_percent,
            tax_rate_percent=tax_rate,
            tax_inclusive=self.tax_inclusive,
        ))

    @property
    def currency(self) -> Currency:
        return self.unit_price.currency

    @property
    def gross_amount(self) -> Money:
        return self.calculation.gross_amount

    @property
    def discount_amount(self) -> Money:
        return self.calculation.discount_amount

    @property
    def net_amount(self) -> Money:
        return self.calculation.net_amount

    @property
    def tax_amount(self) -> Money:
        return self.calculation.tax_amount

    @property
    def line_total(self) -> Money:
        return self.calculation.line_total

    def with_changes(self, **changes) -> LineItem:
        """A copy with the given inputs replaced and amounts re-derived."""
        return replace(self, **changes)


@dataclass(frozen=True)
class InvoiceTotals:
    """
    Invoice-level figures recomputed from the full line list.

    Amounts are full precision; ``rounded()`` gives the display figures.
    """

    currency: Currency
    subtotal_gross: Money
    total_discount: Money
    total_tax: Money
    inclusive_tax: Money
    tax_breakdown: TaxBreakdown
    round_off: Money
    line_count: int = 0
    round_off_enabled: bool = False
    # cent left over when rounded parts do not add up to the rounded grand total
    rounding_adjustment: Money | None = None

    @property
    def taxable_amount(self) -> Money:
        return self.subtotal_gross - self.total_discount

    @property
    def grand_total_raw(self) -> Money:
        """Sum of line totals; tax already inside inclusive prices is not added again."""
        return self.taxable_amount + self.total_tax - self.inclusive_tax

    @property
    def grand_total(self) -> Money:
        total = self.grand_total_raw + self.round_off
        if self.rounding_adjustment is not None:
            total = total + self.rounding_adjustment
        return total

    @classmethod
    def empty(cls, currency: Currency | str, round_off_enabled: bool = False) -> InvoiceTotals:
        if isinstance(currency, str):
            currency = Currency(currency)
        zero = Money.zero(currency)
        return cls(
            currency=currency,
            subtotal_gross=zero,
            total_discount=zero,
            total_tax=zero,
            inclusive_tax=zero,
            tax_breakdown=TaxBreakdown(currency=currency),
            round_off=zero,
            line_count=0,
            round_off_enabled=round_off_enabled,
        )

    def rounded(self) -> InvoiceTotals:
        """
        Round every sum once, half-up to currency precision.

        The grand total is ``grand_total`` rounded in one pass, never the sum
        of rounded parts. Whatever cent the parts miss by lands in
        ``round_off`` when round-off is enabled and in
        ``rounding_adjustment`` otherwise.
        """
        subtotal = self.subtotal_gross.round()
        discount = self.total_discount.round()
        tax = self.total_tax.round()
        inclusive_tax = self.inclusive_tax.round()
        difference = self.grand_total.round() - (subtotal - discount + tax - inclusive_tax)

        zero = Money.zero(self.currency)
        if self.round_off_enabled:
            round_off, adjustment = difference, zero
        else:
            round_off, adjustment = zero, difference
        return InvoiceTotals(
            currency=self.currency,
            subtotal_gross=subtotal,
            total_discount=discount,
            total_tax=tax,
            inclusive_tax=inclusive_tax,
            tax_breakdown=self.tax_breakdown.rounded(),
            round_off=round_off,
            line_count=self.line_count,
            round_off_enabled=self.round_off_enabled,
            rounding_adjustment=adjustment,
        )

    def to_dict(self) -> dict[str, object]:
        """Rounded figures as 2-dp strings."""
        shown = self.rounded()
        return {
            "currency": self.currency.code,
            "line_count": self.line_count,
            "subtotal_gross": str(shown.subtotal_gross.amount),
            "total_discount": str(shown.total_discount.amount),
            "taxable_amount": str(shown.taxable_amount.amount),
            "total_tax": str(shown.total_tax.amount),
            "tax_breakdown": [
                {
                    "tax_rate": str(g.tax_rate_percent),
                    "amount": str(g.amount.amount),
                    "line_count": g.line_count,
                }
                for g in shown.tax_breakdown.groups
            ],
            "round_off": str(shown.round_off.amount),
            "grand_total": str(shown.grand_total.amount),
        }
