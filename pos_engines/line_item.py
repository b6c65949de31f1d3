"""
Line Item Calculator - Derive one invoice line's amounts from its inputs.

Pure functions with no I/O. The caller supplies quantity, unit price,
discount percent, tax rate and the tax-inclusive flag; the calculator
returns gross, discount, net, tax and line total.

Order of operations:
    gross      = quantity * unit_price
    discount   = gross * discount_percent / 100   (never more than gross)
    net        = gross - discount                 (the tax base)
    tax        = net * rate / 100                 (exclusive)
               = net - net / (1 + rate / 100)     (inclusive, tax embedded)
    line_total = net + tax                        (exclusive)
               = net                              (inclusive)

Tax is always computed on the post-discount net amount.

Amounts come back at full precision. ``LineCalculation.rounded()`` produces
the 2-decimal figures used for display and persistence; invoice totals are
summed from the unrounded values.

Usage:
    from decimal import Decimal
    from pos_engines.line_item import calculate_line
    from pos_kernel.domain.values import Money

    calc = calculate_line(
        quantity=2,
        unit_price=Money.of("100", "INR"),
        discount_percent=Decimal("10"),
        tax_rate_percent=Decimal("18"),
        tax_inclusive=False,
    )
    print(calc.rounded().line_total)  # Money: 212.40 INR
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pos_engines.tracer import traced_engine
from pos_kernel.domain.values import (
    HUNDRED,
    ZERO,
    Money,
    clamp_percent,
    safe_divide,
)
from pos_kernel.exceptions import InvalidPriceError, InvalidQuantityError, InvalidTaxRateError
from pos_kernel.logging_config import get_logger

logger = get_logger("engines.line_item")


@dataclass(frozen=True)
class LineCalculation:
    """
    Derived amounts for a single line item.

    Immutable value object. Echoes the inputs it was computed from so the
    tax breakdown can group by rate without going back to the line.
    """

    quantity: int
    unit_price: Money
    discount_percent: Decimal
    tax_rate_percent: Decimal
    tax_inclusive: bool

    gross_amount: Money
    discount_amount: Money
    net_amount: Money
    tax_amount: Money
    line_total: Money

    @property
    def currency(self):
        return self.unit_price.currency

    @property
    def effective_tax_rate(self) -> Decimal:
        """Tax as a fraction of the net amount (0 for a zero net)."""
        return safe_divide(self.tax_amount.amount, self.net_amount.amount)

    def rounded(self) -> LineCalculation:
        """
        Display/persistence figures rounded half-up to currency precision.

        Net and line total are rebuilt from the rounded parts so the
        displayed line always adds up.
        """
        gross = self.gross_amount.round()
        discount = self.discount_amount.round()
        net = gross - discount
        tax = self.tax_amount.round()
        line_total = net if self.tax_inclusive else net + tax
        return LineCalculation(
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount_percent=self.discount_percent,
            tax_rate_percent=self.tax_rate_percent,
            tax_inclusive=self.tax_inclusive,
            gross_amount=gross,
            discount_amount=discount,
            net_amount=net,
            tax_amount=tax,
            line_total=line_total,
        )


def calculate_tax(net_amount: Money, tax_rate_percent: Decimal, tax_inclusive: bool) -> Money:
    """
    Tax on a post-discount net amount.

    Exclusive tax is added on top; inclusive tax is the portion already
    embedded in ``net_amount``. A zero rate yields zero either way.
    """
    if tax_rate_percent == ZERO or net_amount.is_zero:
        return Money.zero(net_amount.currency)
    if tax_inclusive:
        divisor = Decimal("1") + tax_rate_percent / HUNDRED
        return net_amount - net_amount / divisor
    return net_amount.percent(tax_rate_percent)


@traced_engine(
    "line_item",
    "1.0",
    fingerprint_fields=(
        "quantity", "unit_price", "discount_percent", "tax_rate_percent", "tax_inclusive",
    ),
)
def calculate_line(
    *,
    quantity: int,
    unit_price: Money,
    discount_percent: Decimal = ZERO,
    tax_rate_percent: Decimal = ZERO,
    tax_inclusive: bool = False,
) -> LineCalculation:
    """
    Calculate a line item's derived amounts.

    Preconditions:
        quantity >= 1, unit_price >= 0, tax_rate_percent >= 0.
        discount_percent outside [0, 100] is clamped, not rejected.

    Raises:
        InvalidQuantityError: quantity below 1
        InvalidTaxRateError: negative tax rate
        InvalidPriceError: negative unit price
    """
    if quantity < 1:
        logger.warning("line_item_invalid_quantity", extra={"quantity": quantity})
        raise InvalidQuantityError(quantity)
    if unit_price.is_negative:
        logger.warning("line_item_negative_price", extra={
            "unit_price": str(unit_price.amount),
        })
        raise InvalidPriceError(None, str(unit_price.amount))
    if tax_rate_percent < ZERO:
        raise InvalidTaxRateError(str(tax_rate_percent))

    discount_percent = clamp_percent(discount_percent)

    gross = unit_price * quantity
    discount = gross.percent(discount_percent)
    if discount > gross:
        discount = gross
    net = gross - discount

    tax = calculate_tax(net, tax_rate_percent, tax_inclusive)
    line_total = net if tax_inclusive else net + tax

    logger.debug("line_item_calculated", extra={
        "quantity": quantity,
        "unit_price": str(unit_price.amount),
        "discount_percent": str(discount_percent),
        "tax_rate_percent": str(tax_rate_percent),
        "tax_inclusive": tax_inclusive,
        "gross_amount": str(gross.amount),
        "net_amount": str(net.amount),
        "tax_amount": str(tax.amount),
        "line_total": str(line_total.amount),
    })

    return LineCalculation(
        quantity=quantity,
        unit_price=unit_price,
        discount_percent=discount_percent,
        tax_rate_percent=tax_rate_percent,
        tax_inclusive=tax_inclusive,
        gross_amount=gross,
        discount_amount=discount,
        net_amount=net,
        tax_amount=tax,
        line_total=line_total,
    )


def derive_percent(part: Money, whole: Money) -> Decimal:
    """
    ``part / whole * 100``, or 0 when ``whole`` is zero.

    Used to recover a discount percent or tax rate from stored amounts.
    """
    return safe_divide(part.amount, whole.amount) * HUNDRED
