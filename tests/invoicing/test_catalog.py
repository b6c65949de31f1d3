"""
Tests for catalog references.

Covers:
- Normalizing raw product and customer records
- Rejection of negative prices and tax rates, missing ids and names
- Snapshot lookup and case-insensitive search
"""

from decimal import Decimal

import pytest

from pos_invoicing.catalog import (
    CustomerDirectory,
    CustomerRef,
    ProductCatalog,
    ProductRef,
    VendorIdentity,
)
from pos_kernel.domain.values import Money
from pos_kernel.exceptions import (
    InvalidCustomerReferenceError,
    InvalidPriceError,
    InvalidProductReferenceError,
    InvalidTaxRateError,
)

PRODUCT_RECORDS = [
    {"id": 1, "name": "Gel Pen", "price": "100.00", "tax_rate": "18", "sku": "PEN-01",
     "hsn_code": "9608", "category": "Stationery"},
    {"id": 2, "name": "Basmati Rice", "sales_price": 64.5, "category": "Grocery"},
    {"product_id": "3", "product_name": "A4 Notebook", "unit_price": "50", "gst_rate": 12},
]


class TestProductRefFromRecord:
    """Raw catalog records."""

    def test_price_and_rate_spellings(self):
        pen = ProductRef.from_record(PRODUCT_RECORDS[0], "INR")

        assert pen.id == "1"
        assert pen.unit_price == Money.of("100.00", "INR")
        assert pen.tax_rate_percent == Decimal("18")
        assert pen.sku == "PEN-01"
        assert pen.hsn_code == "9608"
        assert pen.category == "Stationery"

    def test_float_price_converted_via_str(self):
        rice = ProductRef.from_record(PRODUCT_RECORDS[1], "INR")
        assert rice.unit_price.amount == Decimal("64.5")

    def test_missing_tax_rate_is_zero(self):
        rice = ProductRef.from_record(PRODUCT_RECORDS[1], "INR")
        assert rice.tax_rate_percent == Decimal("0")
        assert rice.sku is None

    def test_alternate_id_and_name_keys(self):
        notebook = ProductRef.from_record(PRODUCT_RECORDS[2], "INR")
        assert notebook.id == "3"
        assert notebook.name == "A4 Notebook"
        assert notebook.tax_rate_percent == Decimal("12")

    def test_negative_price_rejected(self):
        with pytest.raises(InvalidPriceError) as exc_info:
            ProductRef.from_record({"id": 9, "name": "Bad", "price": "-1"}, "INR")
        assert exc_info.value.product_id == "9"
        assert exc_info.value.code == "INVALID_PRICE"

    def test_negative_tax_rejected(self):
        with pytest.raises(InvalidTaxRateError):
            ProductRef.from_record({"id": 9, "name": "Bad", "price": "1", "tax": "-5"}, "INR")

    def test_missing_price_rejected(self):
        with pytest.raises(InvalidProductReferenceError):
            ProductRef.from_record({"id": 9, "name": "No price"}, "INR")

    def test_unparseable_price_rejected(self):
        with pytest.raises(InvalidProductReferenceError):
            ProductRef.from_record({"id": 9, "name": "Bad", "price": "ten"}, "INR")

    @pytest.mark.parametrize("record", [
        {"name": "No id", "price": "1"},
        {"id": 9, "price": "1"},
        {"id": 9, "name": "  ", "price": "1"},
    ])
    def test_missing_id_or_name_rejected(self, record):
        with pytest.raises(InvalidProductReferenceError):
            ProductRef.from_record(record, "INR")

    def test_zero_price_allowed(self):
        free = ProductRef.from_record({"id": 9, "name": "Sample", "price": 0}, "INR")
        assert free.unit_price.is_zero


class TestProductCatalog:
    """Snapshot lookup and search."""

    def setup_method(self):
        self.catalog = ProductCatalog.from_records(PRODUCT_RECORDS, "INR")

    def test_len(self):
        assert len(self.catalog) == 3

    def test_get(self):
        assert self.catalog.get("2").name == "Basmati Rice"
        assert self.catalog.get(2).name == "Basmati Rice"
        assert self.catalog.get("missing") is None

    def test_search_by_name_case_insensitive(self):
        assert [p.id for p in self.catalog.search("gel")] == ["1"]

    def test_search_by_sku_hsn_category(self):
        assert [p.id for p in self.catalog.search("pen-01")] == ["1"]
        assert [p.id for p in self.catalog.search("9608")] == ["1"]
        assert [p.id for p in self.catalog.search("grocery")] == ["2"]

    def test_empty_query_returns_all(self):
        assert self.catalog.search("") == self.catalog.products
        assert self.catalog.search("   ") == self.catalog.products

    def test_no_match(self):
        assert self.catalog.search("laptop") == ()

    def test_one_bad_record_fails_snapshot(self):
        with pytest.raises(InvalidPriceError):
            ProductCatalog.from_records(
                PRODUCT_RECORDS + [{"id": 4, "name": "Bad", "price": "-3"}], "INR"
            )


class TestCustomers:
    """Customer references and directory."""

    def setup_method(self):
        self.directory = CustomerDirectory.from_records([
            {"id": 1, "name": "Asha Rao", "company": "Rao Traders", "gstin": "27ABCDE1234F1Z5"},
            {"id": 2, "name": "Vikram Iyer", "email": "vikram@example.com", "mobile": "98450 00000"},
        ])

    def test_display_name_prefers_company(self):
        assert self.directory.get("1").display_name == "Rao Traders"
        assert self.directory.get("2").display_name == "Vikram Iyer"

    def test_optional_fields(self):
        vikram = self.directory.get("2")
        assert vikram.email == "vikram@example.com"
        assert vikram.phone == "98450 00000"
        assert vikram.company is None

    def test_search(self):
        assert [c.id for c in self.directory.search("rao")] == ["1"]
        assert [c.id for c in self.directory.search("27abcde")] == ["1"]
        assert len(self.directory.search()) == 2

    def test_missing_name_rejected(self):
        with pytest.raises(InvalidCustomerReferenceError):
            CustomerRef.from_record({"id": 3})

    def test_missing_id_rejected(self):
        with pytest.raises(InvalidCustomerReferenceError):
            CustomerRef(id="", name="Nobody")


class TestVendorIdentity:
    """Biller identity."""

    def test_biller_name_prefers_shop(self):
        vendor = VendorIdentity(vendor_id="v-1", name="Kiran Shah", shop_name="Shah Stationers")
        assert vendor.biller_name == "Shah Stationers"

    def test_biller_name_falls_back_to_name(self):
        assert VendorIdentity(vendor_id="v-1", name="Kiran Shah").biller_name == "Kiran Shah"

    def test_completeness(self):
        assert VendorIdentity(vendor_id="v-1", name="Kiran").is_complete
        assert not VendorIdentity(vendor_id="", name="Kiran").is_complete
        assert not VendorIdentity(vendor_id="v-1", name="").is_complete

    def test_from_record(self):
        vendor = VendorIdentity.from_record({"id": 7, "name": "Kiran", "gst_number": "29X"})
        assert vendor.vendor_id == "7"
        assert vendor.gst_number == "29X"
