"""
Module: pos_invoicing
Responsibility:
    The invoice editing session: catalog references, the Invoice Aggregate,
    the payload builder for the persistence API and hydration of persisted
    invoices for editing.

Architecture position:
    Invoicing -- stateful, in-memory, no network I/O.
    May import pos_kernel, pos_engines and pos_config.

Usage:
    from pos_config import get_active_settings
    from pos_invoicing import InvoiceAggregate, ProductRef, build_payload

    invoice = InvoiceAggregate(get_active_settings())
    invoice.add_item(product, 2)
    payload = build_payload(invoice, customer, vendor).to_dict()
"""

from pos_invoicing.aggregate import InvoiceAggregate
from pos_invoicing.catalog import (
    CustomerDirectory,
    CustomerRef,
    ProductCatalog,
    ProductRef,
    VendorIdentity,
)
from pos_invoicing.hydration import HydratedInvoice, hydrate_invoice
from pos_invoicing.models import InvoiceState, InvoiceTotals, LineItem
from pos_invoicing.payload import (
    InvoicePayload,
    PayloadLine,
    build_draft_payload,
    build_payload,
    validate_for_submission,
)

__all__ = [
    # Catalog
    "CustomerDirectory",
    "CustomerRef",
    "ProductCatalog",
    "ProductRef",
    "VendorIdentity",
    # Aggregate
    "InvoiceAggregate",
    "InvoiceState",
    "InvoiceTotals",
    "LineItem",
    # Payload
    "InvoicePayload",
    "PayloadLine",
    "build_draft_payload",
    "build_payload",
    "validate_for_submission",
    # Hydration
    "HydratedInvoice",
    "hydrate_invoice",
]
