"""
Invoice Hydration (``pos_invoicing.hydration``).

Responsibility
--------------
Rebuilds an ``InvoiceAggregate`` from a persisted invoice record for the
"edit invoice" flow. The persistence API stores amounts, not inputs, so the
line inputs are recovered:

    unit_price        = gross_amt / qty
    discount_percent  = discount_percent            (when stored)
                      = discount / gross_amt * 100  (otherwise, 0 if gross is 0)
    tax_rate_percent  = tax_rate                    (when stored)
                      = gst / net * 100          (tax-exclusive lines)
                      = gst / (net - gst) * 100  (tax-inclusive lines)

where net = gross_amt - discount. Divisions by zero give 0.

Recovered percents are rounded to 2 places so lines persisted at the same
rate land in the same tax group again.

Records come in two shapes: a ``products`` array, or the older single
product stored in flat fields on the invoice itself.

Failure modes
-------------
* ``InvoiceHydrationError`` -- unusable record (no products, bad numbers,
  unknown currency, payment status or mode).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pos_config.schema import InvoiceSettings, PaymentMode, PaymentStatus
from pos_engines.line_item import derive_percent
from pos_invoicing.aggregate import InvoiceAggregate
from pos_invoicing.catalog import ProductCatalog
from pos_invoicing.models import LineItem
from pos_kernel.domain.currency import CurrencyRegistry
from pos_kernel.domain.values import HUNDRED, ZERO, Money, clamp_percent, round_money, to_decimal
from pos_kernel.exceptions import InvoiceHydrationError, PosKernelError
from pos_kernel.logging_config import LogContext, get_logger

logger = get_logger("invoicing.hydration")

_TRUE_STRINGS = frozenset({"1", "true", "yes"})
_FALSE_STRINGS = frozenset({"0", "false", "no", ""})


@dataclass(frozen=True)
class HydratedInvoice:
    """A persisted invoice loaded back into an editing session."""

    invoice_id: str | None
    aggregate: InvoiceAggregate
    billing_to: str | None
    payment_status: PaymentStatus
    payment_mode: PaymentMode
    utr_number: str | None = None


def parse_tax_inclusive(value: Any) -> bool:
    """Stored flag: bool, 0/1, or their string forms."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"Cannot read tax_inclusive flag {value!r}")


def _parse_amount(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    return to_decimal(value)


def _parse_quantity(value: Any) -> int:
    if value is None or value == "":
        return 1
    quantity = to_decimal(value)
    if quantity != quantity.to_integral_value():
        raise ValueError(f"Quantity must be a whole number, got {value!r}")
    return int(quantity)


def _product_entries(record: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    products = record.get("products")
    if products:
        if not isinstance(products, list):
            raise ValueError("products must be a list")
        return products
    if record.get("product_name") or record.get("product_id"):
        # Older invoices hold one product in flat fields
        return [record]
    return []


def _line_from_entry(
    entry: Mapping[str, Any],
    settings: InvoiceSettings,
    catalog: ProductCatalog | None,
) -> LineItem:
    quantity = _parse_quantity(entry.get("qty"))
    gross = _parse_amount(entry.get("gross_amt"))
    discount = _parse_amount(entry.get("discount"))

    unit_price = Money.of(gross, settings.currency) / quantity

    if entry.get("discount_percent") not in (None, ""):
        discount_percent = to_decimal(entry["discount_percent"])
    else:
        discount_percent = round_money(
            derive_percent(Money.of(discount, settings.currency), Money.of(gross, settings.currency))
        )
    discount_percent = clamp_percent(discount_percent, high=HUNDRED)

    tax_inclusive = parse_tax_inclusive(entry.get("tax_inclusive"))
    if entry.get("tax_rate") not in (None, ""):
        tax_rate = to_decimal(entry["tax_rate"])
    else:
        gst = Money.of(_parse_amount(entry.get("gst")), settings.currency)
        net = Money.of(gross - discount, settings.currency)
        # inclusive tax sits inside net, so the rate applies to net less tax
        base = net - gst if tax_inclusive else net
        tax_rate = round_money(derive_percent(gst, base))

    product_id = entry.get("product_id")
    product = catalog.get(str(product_id)) if catalog is not None and product_id is not None else None
    name = entry.get("product_name") or (product.name if product else None)
    if not name:
        raise ValueError("product_name is required")
    sku = entry.get("product_sku") or (product.sku if product else None)

    return LineItem(
        line_id=str(uuid4()),
        product_id=str(product_id) if product_id is not None else str(name),
        product_name=str(name),
        product_sku=str(sku) if sku else None,
        quantity=quantity,
        unit_price=unit_price,
        discount_percent=discount_percent,
        tax_rate_percent=tax_rate,
        tax_inclusive=tax_inclusive,
    )


def hydrate_invoice(
    record: Mapping[str, Any],
    catalog: ProductCatalog | None = None,
    settings: InvoiceSettings | None = None,
) -> HydratedInvoice:
    """
    Load a persisted invoice record into a new editing session.

    ``catalog`` fills in product names and SKUs the record lacks; stored
    prices and rates are never replaced by current catalog values.

    Raises:
        InvoiceHydrationError: the record cannot be loaded.
    """
    invoice_id = record.get("invoice_id") or record.get("id")
    invoice_id = str(invoice_id) if invoice_id is not None else None
    with LogContext.bind(invoice_id=invoice_id):
        return _hydrate(record, invoice_id, catalog, settings or InvoiceSettings.with_defaults())


def _hydrate(
    record: Mapping[str, Any],
    invoice_id: str | None,
    catalog: ProductCatalog | None,
    settings: InvoiceSettings,
) -> HydratedInvoice:
    currency = record.get("currency")
    if currency:
        if not CurrencyRegistry.is_valid(str(currency).upper().strip()):
            raise InvoiceHydrationError(f"unknown currency {currency!r}", invoice_id)
        settings = replace(settings, currency=str(currency))

    entries = _product_entries(record)
    if not entries:
        raise InvoiceHydrationError("invoice has no products", invoice_id)

    try:
        lines = [_line_from_entry(entry, settings, catalog) for entry in entries]
    except (ValueError, PosKernelError) as e:
        logger.warning("invoice_hydration_failed", extra={"error": str(e)})
        raise InvoiceHydrationError(str(e), invoice_id) from e

    try:
        payment_status = PaymentStatus(record.get("payment_status") or settings.default_payment_status)
        payment_mode = PaymentMode(record.get("payment_mode") or settings.default_payment_mode)
    except ValueError as e:
        raise InvoiceHydrationError(str(e), invoice_id) from e

    aggregate = InvoiceAggregate(settings, lines)
    utr_number = str(record.get("utr_number") or "").strip() or None

    logger.info("invoice_hydrated", extra={
        "line_count": len(aggregate),
        "grand_total": aggregate.display_totals().grand_total,
        "stored_grand_total": str(record.get("grand_total")),
    })

    return HydratedInvoice(
        invoice_id=invoice_id,
        aggregate=aggregate,
        billing_to=record.get("billing_to") or None,
        payment_status=payment_status,
        payment_mode=payment_mode,
        utr_number=utr_number,
    )
