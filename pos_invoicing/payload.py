"""
Invoice Payload Builder (``pos_invoicing.payload``).

Responsibility
--------------
Projects the final state of an ``InvoiceAggregate`` plus the customer and
vendor identity into the shape the persistence API accepts. All money in
the payload is rounded half-up to currency precision; ``to_dict()`` emits
amounts as fixed-point strings under the API's snake_case wire keys.

Failure modes
-------------
* ``ValidationError`` -- no lines, no customer selected, or no vendor
  identity. Every failed precondition is reported in ``reasons``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from pos_config.schema import InvoiceSettings, PaymentMode, PaymentStatus
from pos_invoicing.aggregate import InvoiceAggregate
from pos_invoicing.catalog import CustomerRef, VendorIdentity
from pos_invoicing.models import LineItem
from pos_kernel.domain.values import Money
from pos_kernel.exceptions import ValidationError
from pos_kernel.logging_config import LogContext, get_logger

logger = get_logger("invoicing.payload")

REASON_NO_LINES = "invoice has no line items"
REASON_NO_CUSTOMER = "no customer selected"
REASON_NO_VENDOR = "vendor identity is missing"


def _amount(value: Money) -> str:
    return str(value.round().amount)


def _percent(value: Decimal) -> str:
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return str(value)


@dataclass(frozen=True)
class PayloadLine:
    """One persisted line; monetary fields are already rounded."""

    product_name: str
    product_id: str | None
    product_sku: str | None
    quantity: int
    gross_amount: Money
    tax_rate_percent: Decimal
    tax_inclusive: bool
    discount_amount: Money
    discount_percent: Decimal
    line_total: Money

    @classmethod
    def from_line(cls, line: LineItem) -> PayloadLine:
        shown = line.calculation.rounded()
        return cls(
            product_name=line.product_name,
            product_id=line.product_id,
            product_sku=line.product_sku,
            quantity=line.quantity,
            gross_amount=shown.gross_amount,
            tax_rate_percent=line.tax_rate_percent,
            tax_inclusive=line.tax_inclusive,
            discount_amount=shown.discount_amount,
            discount_percent=line.discount_percent,
            line_total=shown.line_total,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "product_name": self.product_name,
            "qty": self.quantity,
            "gross_amt": _amount(self.gross_amount),
            "tax_rate": _percent(self.tax_rate_percent),
            "tax_inclusive": self.tax_inclusive,
            "discount": _amount(self.discount_amount),
            "discount_percent": _percent(self.discount_percent),
            "total": _amount(self.line_total),
        }
        if self.product_id is not None:
            data["product_id"] = self.product_id
        if self.product_sku is not None:
            data["product_sku"] = self.product_sku
        return data


@dataclass(frozen=True)
class InvoicePayload:
    """The finalized invoice, ready for the persistence collaborator."""

    biller_name: str
    vendor_id: str
    customer_id: str
    billing_to: str
    lines: tuple[PayloadLine, ...]
    subtotal_gross: Money
    total_discount: Money
    total_tax: Money
    round_off: Money
    grand_total: Money
    payment_status: PaymentStatus
    payment_mode: PaymentMode | None = None
    utr_number: str | None = None

    @property
    def currency(self) -> str:
        return self.grand_total.currency.code

    def to_dict(self) -> dict[str, Any]:
        """Wire shape expected by the invoice endpoints."""
        data: dict[str, Any] = {
            "biller_name": self.biller_name,
            "vendor_id": self.vendor_id,
            "customer_id": self.customer_id,
            "billing_to": self.billing_to,
            "products": [line.to_dict() for line in self.lines],
            "grand_total": _amount(self.grand_total),
            "payment_status": self.payment_status.value,
        }
        if not self.round_off.is_zero:
            data["round_off"] = _amount(self.round_off)
        if self.payment_mode is not None:
            data["payment_mode"] = self.payment_mode.value
        if self.utr_number:
            data["utr_number"] = self.utr_number
        return data


def validate_for_submission(
    aggregate: InvoiceAggregate,
    customer: CustomerRef | None,
    vendor: VendorIdentity | None,
) -> list[str]:
    """Every failed payload precondition, in a stable order."""
    reasons = []
    if aggregate.is_empty:
        reasons.append(REASON_NO_LINES)
    if customer is None:
        reasons.append(REASON_NO_CUSTOMER)
    if vendor is None or not vendor.is_complete:
        reasons.append(REASON_NO_VENDOR)
    return reasons


def build_payload(
    aggregate: InvoiceAggregate,
    customer: CustomerRef | None,
    vendor: VendorIdentity | None,
    payment_status: PaymentStatus | str | None = None,
    payment_mode: PaymentMode | str | None = None,
    utr_number: str | None = None,
) -> InvoicePayload:
    """
    Build the persistence payload for a finished invoice.

    Payment status and mode default from the aggregate's settings. A cash
    payment mode is left out of the payload when
    ``settings.omit_cash_payment_mode`` is set.

    Raises:
        ValidationError: preconditions failed; nothing is built.
    """
    reasons = validate_for_submission(aggregate, customer, vendor)
    if reasons:
        logger.warning("invoice_payload_rejected", extra={
            "reasons": reasons,
            "line_count": len(aggregate),
        })
        raise ValidationError(reasons)

    settings: InvoiceSettings = aggregate.settings
    status = PaymentStatus(payment_status or settings.default_payment_status)
    mode: PaymentMode | None = PaymentMode(payment_mode or settings.default_payment_mode)
    if mode is PaymentMode.CASH and settings.omit_cash_payment_mode:
        mode = None

    totals = aggregate.display_totals()
    payload = InvoicePayload(
        biller_name=vendor.biller_name,
        vendor_id=vendor.vendor_id,
        customer_id=customer.id,
        billing_to=customer.display_name,
        lines=tuple(PayloadLine.from_line(line) for line in aggregate.lines),
        subtotal_gross=totals.subtotal_gross,
        total_discount=totals.total_discount,
        total_tax=totals.total_tax,
        round_off=totals.round_off,
        grand_total=totals.grand_total,
        payment_status=status,
        payment_mode=mode,
        utr_number=(utr_number or "").strip() or None,
    )

    with LogContext.bind(vendor_id=vendor.vendor_id):
        logger.info("invoice_payload_built", extra={
            "customer_id": customer.id,
            "line_count": len(payload.lines),
            "grand_total": payload.grand_total,
            "payment_status": status,
        })
    return payload


def build_draft_payload(
    aggregate: InvoiceAggregate,
    customer: CustomerRef | None,
    vendor: VendorIdentity | None,
    payment_mode: PaymentMode | str | None = None,
    utr_number: str | None = None,
) -> InvoicePayload:
    """Same as ``build_payload`` with the status forced to ``draft``."""
    return build_payload(
        aggregate,
        customer,
        vendor,
        payment_status=PaymentStatus.DRAFT,
        payment_mode=payment_mode,
        utr_number=utr_number,
    )
