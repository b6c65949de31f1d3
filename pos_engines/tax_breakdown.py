"""
Tax Breakdown Aggregator - Group invoice lines by tax rate.

Pure functions with no I/O. Input is the ``LineCalculation`` list of an
invoice; output is one group per distinct ``tax_rate_percent`` carrying the
summed tax, the summed taxable (net) amount and the member line count.

Rates compare numerically, so 18 and 18.00 land in the same group. Zero
rates are grouped like any other and flagged ``is_zero_rate`` so a display
can suppress them ("no tax applicable").

Group order carries no meaning; ``groups`` is sorted by rate only so output
is deterministic.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from pos_engines.line_item import LineCalculation
from pos_engines.tracer import traced_engine
from pos_kernel.domain.values import ZERO, Currency, Money
from pos_kernel.logging_config import get_logger

logger = get_logger("engines.tax_breakdown")


@dataclass(frozen=True)
class TaxGroup:
    """Summed tax for all lines sharing one tax rate."""

    tax_rate_percent: Decimal
    amount: Money
    taxable_amount: Money
    line_count: int

    @property
    def is_zero_rate(self) -> bool:
        return self.tax_rate_percent == ZERO

    def rounded(self) -> TaxGroup:
        return TaxGroup(
            tax_rate_percent=self.tax_rate_percent,
            amount=self.amount.round(),
            taxable_amount=self.taxable_amount.round(),
            line_count=self.line_count,
        )


@dataclass(frozen=True)
class TaxBreakdown:
    """
    Per-rate tax summary of an invoice.

    Immutable value object; ``total`` always equals the sum of group amounts.
    """

    currency: Currency
    groups: tuple[TaxGroup, ...] = ()

    @property
    def total(self) -> Money:
        return Money.sum((g.amount for g in self.groups), self.currency)

    @property
    def group_count(self) -> int:
        return len(self.groups)

    def for_rate(self, tax_rate_percent: Decimal) -> TaxGroup | None:
        """The group for a rate, or None if no line carries it."""
        for group in self.groups:
            if group.tax_rate_percent == tax_rate_percent:
                return group
        return None

    def visible(self, suppress_zero_rate: bool = True) -> tuple[TaxGroup, ...]:
        """Groups to display; zero-rate groups dropped when suppressed."""
        if not suppress_zero_rate:
            return self.groups
        return tuple(g for g in self.groups if not g.is_zero_rate)

    def as_set(self) -> frozenset[tuple[Decimal, Decimal, int]]:
        """``(rate, amount, line_count)`` tuples, for order-free comparison."""
        return frozenset(
            (g.tax_rate_percent, g.amount.amount, g.line_count) for g in self.groups
        )

    def rounded(self) -> TaxBreakdown:
        return TaxBreakdown(
            currency=self.currency,
            groups=tuple(g.rounded() for g in self.groups),
        )


@traced_engine("tax_breakdown", "1.0", fingerprint_fields=("lines", "currency"))
def build_tax_breakdown(
    *,
    lines: Sequence[LineCalculation],
    currency: Currency | str,
) -> TaxBreakdown:
    """
    Group line calculations by tax rate and sum each group.

    Sums are kept at full precision; call ``rounded()`` for display.

    Args:
        lines: Line calculations for every line on the invoice
        currency: Invoice currency (used for the empty breakdown)

    Returns:
        TaxBreakdown with one group per distinct rate
    """
    if isinstance(currency, str):
        currency = Currency(currency)

    amounts: dict[Decimal, Money] = {}
    taxable: dict[Decimal, Money] = {}
    counts: dict[Decimal, int] = {}

    for line in lines:
        rate = line.tax_rate_percent
        if rate not in amounts:
            amounts[rate] = Money.zero(currency)
            taxable[rate] = Money.zero(currency)
            counts[rate] = 0
        amounts[rate] = amounts[rate] + line.tax_amount
        taxable[rate] = taxable[rate] + line.net_amount
        counts[rate] += 1

    groups = tuple(
        TaxGroup(
            tax_rate_percent=rate,
            amount=amounts[rate],
            taxable_amount=taxable[rate],
            line_count=counts[rate],
        )
        for rate in sorted(amounts)
    )

    logger.debug("tax_breakdown_built", extra={
        "line_count": len(lines),
        "group_count": len(groups),
        "rates": [str(g.tax_rate_percent) for g in groups],
    })

    return TaxBreakdown(currency=currency, groups=groups)
