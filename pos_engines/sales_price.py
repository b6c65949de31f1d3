"""
Sales Price Calculator - Suggest a catalog selling price from a purchase price.

Used by the product add/edit forms. Mirrors the line item order of
operations: discount first, then tax on the discounted price unless the
price is already tax-inclusive.

    discounted  = purchase_price * (1 - discount_percent / 100)
    sales_price = discounted * (1 + tax_percent / 100)   (exclusive)
                = discounted                           (inclusive)

The result is rounded half-up to currency precision.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pos_engines.tracer import traced_engine
from pos_kernel.domain.values import ZERO, Money, clamp_percent
from pos_kernel.exceptions import InvalidTaxRateError
from pos_kernel.logging_config import get_logger

logger = get_logger("engines.sales_price")


@dataclass(frozen=True)
class SalesPriceResult:
    """Breakdown of a suggested sales price."""

    purchase_price: Money
    discounted_price: Money
    tax_amount: Money
    sales_price: Money
    tax_inclusive: bool


@traced_engine(
    "sales_price",
    "1.0",
    fingerprint_fields=("purchase_price", "discount_percent", "tax_percent", "tax_inclusive"),
)
def calculate_sales_price(
    *,
    purchase_price: Money,
    discount_percent: Decimal = ZERO,
    tax_percent: Decimal = ZERO,
    tax_inclusive: bool = False,
) -> SalesPriceResult:
    """
    Suggest a sales price.

    A purchase price of zero or less suggests zero; the form leaves the
    field alone in that case.

    Raises:
        InvalidTaxRateError: negative tax percent
    """
    if tax_percent < ZERO:
        raise InvalidTaxRateError(str(tax_percent))

    currency = purchase_price.currency
    if not purchase_price.is_positive:
        zero = Money.zero(currency)
        return SalesPriceResult(
            purchase_price=purchase_price,
            discounted_price=zero,
            tax_amount=zero,
            sales_price=zero,
            tax_inclusive=tax_inclusive,
        )

    discounted = purchase_price - purchase_price.percent(clamp_percent(discount_percent))
    tax = Money.zero(currency) if tax_inclusive else discounted.percent(tax_percent)
    sales_price = (discounted + tax).round()

    logger.debug("sales_price_calculated", extra={
        "purchase_price": str(purchase_price.amount),
        "discount_percent": str(discount_percent),
        "tax_percent": str(tax_percent),
        "tax_inclusive": tax_inclusive,
        "sales_price": str(sales_price.amount),
    })

    return SalesPriceResult(
        purchase_price=purchase_price,
        discounted_price=discounted.round(),
        tax_amount=tax.round(),
        sales_price=sales_price,
        tax_inclusive=tax_inclusive,
    )
