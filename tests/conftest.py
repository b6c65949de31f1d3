"""
Pytest fixtures for the point-of-sale invoicing test suite.

Provides:
- Structured logging configuration and log capture
- Default settings, products, customers and vendor identity
- An empty invoice aggregate per test
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from pos_config import InvoiceSettings
from pos_invoicing.aggregate import InvoiceAggregate
from pos_invoicing.catalog import CustomerRef, ProductRef, VendorIdentity
from pos_kernel.domain.values import Money
from pos_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture pos_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, invoice, pen):
            invoice.add_item(pen, 2)
            logs = captured_logs()
            assert any(r["message"] == "invoice_item_added" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("pos_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def settings() -> InvoiceSettings:
    return InvoiceSettings.with_defaults()


@pytest.fixture
def invoice(settings) -> InvoiceAggregate:
    """An empty editing session with default settings (INR, no round-off)."""
    return InvoiceAggregate(settings)


@pytest.fixture
def pen() -> ProductRef:
    """100.00 at 18%."""
    return ProductRef(
        id="p-pen",
        name="Gel Pen",
        unit_price=Money.of("100.00", "INR"),
        tax_rate_percent=Decimal("18"),
        sku="PEN-01",
    )


@pytest.fixture
def notebook() -> ProductRef:
    """50.00 at 12%."""
    return ProductRef(
        id="p-notebook",
        name="Notebook",
        unit_price=Money.of("50.00", "INR"),
        tax_rate_percent=Decimal("12"),
        sku="NB-01",
    )


@pytest.fixture
def rice() -> ProductRef:
    """Untaxed staple."""
    return ProductRef(
        id="p-rice",
        name="Rice 1kg",
        unit_price=Money.of("64.50", "INR"),
        tax_rate_percent=Decimal("0"),
    )


@pytest.fixture
def customer() -> CustomerRef:
    return CustomerRef(id="c-1", name="Asha Rao", company="Rao Traders")


@pytest.fixture
def vendor() -> VendorIdentity:
    return VendorIdentity(vendor_id="v-1", name="Kiran Shah", shop_name="Shah Stationers")
