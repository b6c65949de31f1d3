"""
Invoice Aggregate (``pos_invoicing.aggregate``).

Responsibility
--------------
Owns the ordered line items of one invoice editing session and the
invoice-level totals derived from them. Every mutation recomputes the
touched line and then rebuilds all invoice totals and the tax breakdown
from the full line list before returning.

The same aggregate serves the "new invoice" flow (start empty, ``clear()``
after submission) and the "edit invoice" flow (built by
``pos_invoicing.hydration.hydrate_invoice`` and discarded afterwards).

Architecture position
---------------------
**Invoicing layer** -- in-memory, single-threaded, no I/O. Settings are
passed in explicitly; there is no module-level state.

Invariants enforced
-------------------
After every mutation:

1. ``subtotal_gross == sum(line.gross_amount)``
2. ``total_discount == sum(line.discount_amount)``
3. ``taxable_amount == subtotal_gross - total_discount``
4. ``total_tax == sum(line.tax_amount) == tax_breakdown.total``
5. ``grand_total_raw == taxable_amount + total_tax - inclusive_tax``, where
   ``inclusive_tax`` is the tax already inside tax-inclusive prices (zero
   for an all-exclusive invoice), so the grand total is the sum of line totals.
6. No line has ``quantity < 1``.

Failure modes
-------------
* ``InvalidQuantityError`` -- ``add_item`` with quantity < 1; state untouched.
* ``LineItemNotFoundError`` -- quantity/discount update on an unknown line.
* ``CurrencyMismatchError`` -- product priced in another currency.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from uuid import uuid4

from pos_config.schema import InvoiceSettings
from pos_engines.tax_breakdown import TaxGroup, build_tax_breakdown
from pos_invoicing.catalog import ProductRef
from pos_invoicing.models import InvoiceState, InvoiceTotals, LineItem
from pos_kernel.domain.values import ZERO, Currency, Money, clamp_percent, to_decimal
from pos_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidQuantityError,
    LineItemNotFoundError,
)
from pos_kernel.logging_config import get_logger

logger = get_logger("invoicing.aggregate")


class InvoiceAggregate:
    """
    Mutable editing session for one invoice.

    Lines keep insertion order. Adding a product that is already on the
    invoice merges into its line instead of appending a second one.
    """

    def __init__(
        self,
        settings: InvoiceSettings | None = None,
        lines: Iterable[LineItem] = (),
    ):
        self._settings = settings or InvoiceSettings.with_defaults()
        self._currency = Currency(self._settings.currency)
        self._lines: list[LineItem] = []
        for line in lines:
            self._check_currency(line.unit_price, "load")
            self._lines.append(line)
        self._totals = self._recompute()

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> InvoiceSettings:
        return self._settings

    @property
    def currency(self) -> Currency:
        return self._currency

    @property
    def lines(self) -> tuple[LineItem, ...]:
        return tuple(self._lines)

    @property
    def totals(self) -> InvoiceTotals:
        """Full-precision totals as of the last mutation."""
        return self._totals

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def state(self) -> InvoiceState:
        return InvoiceState.EMPTY if self.is_empty else InvoiceState.POPULATED

    def __len__(self) -> int:
        return len(self._lines)

    def get_line(self, line_id: str) -> LineItem | None:
        for line in self._lines:
            if line.line_id == line_id:
                return line
        return None

    def find_line_for_product(self, product_id: str) -> LineItem | None:
        for line in self._lines:
            if line.product_id == str(product_id):
                return line
        return None

    def display_totals(self) -> InvoiceTotals:
        """Totals rounded for display and persistence."""
        return self._totals.rounded()

    def visible_tax_breakdown(self) -> tuple[TaxGroup, ...]:
        """Rounded tax groups to show, zero rates suppressed per settings."""
        return self._totals.tax_breakdown.rounded().visible(
            self._settings.suppress_zero_rate_in_breakdown
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_item(self, product: ProductRef, quantity: int = 1) -> LineItem:
        """
        Add ``quantity`` of a product.

        An existing line for the same product id has its quantity increased
        and its unit price and tax rate re-snapshotted from ``product``;
        otherwise a new line is appended with no discount.

        Returns:
            The created or merged line.

        Raises:
            InvalidQuantityError: quantity below 1 (nothing changes).
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            logger.warning("invoice_item_rejected", extra={
                "product_id": product.id,
                "quantity": str(quantity),
            })
            raise InvalidQuantityError(quantity, product.id)
        self._check_currency(product.unit_price, "add_item")

        existing = self.find_line_for_product(product.id)
        if existing is not None:
            line = existing.with_changes(
                quantity=existing.quantity + quantity,
                unit_price=product.unit_price,
                tax_rate_percent=product.tax_rate_percent,
                product_name=product.name,
                product_sku=product.sku,
            )
            self._replace(line)
            logger.info("invoice_item_merged", extra={
                "line_id": line.line_id,
                "product_id": product.id,
                "added_quantity": quantity,
                "quantity": line.quantity,
            })
        else:
            line = LineItem(
                line_id=str(uuid4()),
                product_id=product.id,
                product_name=product.name,
                product_sku=product.sku,
                quantity=quantity,
                unit_price=product.unit_price,
                discount_percent=ZERO,
                tax_rate_percent=product.tax_rate_percent,
                tax_inclusive=self._settings.default_tax_inclusive,
            )
            self._lines.append(line)
            logger.info("invoice_item_added", extra={
                "line_id": line.line_id,
                "product_id": product.id,
                "quantity": quantity,
                "unit_price": str(product.unit_price.amount),
                "tax_rate_percent": str(product.tax_rate_percent),
            })

        self._totals = self._recompute()
        return line

    def update_quantity(self, line_id: str, quantity: int) -> bool:
        """
        Set a line's quantity.

        A quantity below 1 is ignored: the line keeps its quantity and
        ``False`` is returned. Setting the same quantity twice leaves the
        invoice unchanged.

        Raises:
            LineItemNotFoundError: no line with ``line_id``.
        """
        line = self._require_line(line_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            logger.warning("invoice_quantity_update_ignored", extra={
                "line_id": line_id,
                "quantity": str(quantity),
            })
            return False

        if quantity != line.quantity:
            self._replace(line.with_changes(quantity=quantity))
            self._totals = self._recompute()
        logger.info("invoice_quantity_updated", extra={
            "line_id": line_id,
            "quantity": quantity,
        })
        return True

    def update_discount_percent(self, line_id: str, discount_percent: Decimal | str | int) -> LineItem:
        """
        Set a line's discount percent, clamped to ``[0, max_discount_percent]``.

        Raises:
            LineItemNotFoundError: no line with ``line_id``.
            ValueError: unparseable percent.
        """
        line = self._require_line(line_id)
        requested = to_decimal(discount_percent)
        applied = clamp_percent(requested, high=self._settings.max_discount_percent)
        if applied != requested:
            logger.info("invoice_discount_clamped", extra={
                "line_id": line_id,
                "requested_percent": str(requested),
                "applied_percent": str(applied),
            })

        updated = line.with_changes(discount_percent=applied)
        self._replace(updated)
        self._totals = self._recompute()
        logger.info("invoice_discount_updated", extra={
            "line_id": line_id,
            "discount_percent": str(applied),
            "discount_amount": str(updated.discount_amount.amount),
        })
        return updated

    def set_tax_inclusive(self, line_id: str, tax_inclusive: bool) -> LineItem:
        """
        Flip a line between tax-inclusive and tax-exclusive pricing.

        Raises:
            LineItemNotFoundError: no line with ``line_id``.
        """
        line = self._require_line(line_id)
        updated = line.with_changes(tax_inclusive=bool(tax_inclusive))
        self._replace(updated)
        self._totals = self._recompute()
        logger.info("invoice_tax_mode_updated", extra={
            "line_id": line_id,
            "tax_inclusive": updated.tax_inclusive,
        })
        return updated

    def remove_item(self, line_id: str) -> bool:
        """Remove a line. Unknown ids are a no-op returning ``False``."""
        line = self.get_line(line_id)
        if line is None:
            logger.debug("invoice_remove_unknown_line", extra={"line_id": line_id})
            return False
        self._lines.remove(line)
        self._totals = self._recompute()
        logger.info("invoice_item_removed", extra={
            "line_id": line_id,
            "product_id": line.product_id,
            "remaining_lines": len(self._lines),
        })
        return True

    def clear(self) -> None:
        """Discard every line, returning the session to ``EMPTY``."""
        removed = len(self._lines)
        self._lines.clear()
        self._totals = self._recompute()
        logger.info("invoice_cleared", extra={"removed_lines": removed})

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_line(self, line_id: str) -> LineItem:
        line = self.get_line(line_id)
        if line is None:
            logger.warning("invoice_line_not_found", extra={"line_id": line_id})
            raise LineItemNotFoundError(line_id)
        return line

    def _replace(self, line: LineItem) -> None:
        for index, current in enumerate(self._lines):
            if current.line_id == line.line_id:
                self._lines[index] = line
                return
        raise LineItemNotFoundError(line.line_id)

    def _check_currency(self, amount: Money, operation: str) -> None:
        if amount.currency != self._currency:
            raise CurrencyMismatchError(self._currency.code, amount.currency.code, operation)

    def _recompute(self) -> InvoiceTotals:
        """Rebuild every invoice-level figure from the full line list."""
        if not self._lines:
            return InvoiceTotals.empty(self._currency, self._settings.round_off_enabled)

        calculations = [line.calculation for line in self._lines]
        subtotal = Money.sum((c.gross_amount for c in calculations), self._currency)
        discount = Money.sum((c.discount_amount for c in calculations), self._currency)
        tax = Money.sum((c.tax_amount for c in calculations), self._currency)
        inclusive_tax = Money.sum(
            (c.tax_amount for c in calculations if c.tax_inclusive), self._currency
        )
        breakdown = build_tax_breakdown(lines=calculations, currency=self._currency)

        grand_total_raw = subtotal - discount + tax - inclusive_tax
        if self._settings.round_off_enabled:
            round_off = grand_total_raw.round_to_whole() - grand_total_raw
        else:
            round_off = Money.zero(self._currency)

        totals = InvoiceTotals(
            currency=self._currency,
            subtotal_gross=subtotal,
            total_discount=discount,
            total_tax=tax,
            inclusive_tax=inclusive_tax,
            tax_breakdown=breakdown,
            round_off=round_off,
            line_count=len(self._lines),
            round_off_enabled=self._settings.round_off_enabled,
        )
        logger.debug("invoice_totals_recomputed", extra={
            "line_count": totals.line_count,
            "subtotal_gross": str(subtotal.amount),
            "total_discount": str(discount.amount),
            "total_tax": str(tax.amount),
            "inclusive_tax": str(inclusive_tax.amount),
            "grand_total_raw": str(grand_total_raw.amount),
            "round_off": str(round_off.amount),
        })
        return totals
