"""
Catalog references (``pos_invoicing.catalog``).

Responsibility
--------------
Frozen value objects for what the invoicing core consumes from the catalog
and customer collaborators: ``ProductRef``, ``CustomerRef`` and the
billing ``VendorIdentity``. ``from_record`` normalizes the loosely-shaped
JSON the dashboard API returns (several field spellings, numbers as
strings or floats) into these types.

``ProductCatalog`` and ``CustomerDirectory`` are immutable snapshots of one
fetch with id lookup and case-insensitive search. A refreshed snapshot
never touches lines already on an invoice: prices and tax rates are copied
into the line when it is added.

Invariants enforced
-------------------
* A ``ProductRef`` never carries a negative unit price (``InvalidPriceError``)
  or a negative tax rate (``InvalidTaxRateError``).
* All monetary fields are ``Money``; floats are converted via ``str``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pos_kernel.domain.values import ZERO, Currency, Money, to_decimal
from pos_kernel.exceptions import (
    InvalidCustomerReferenceError,
    InvalidPriceError,
    InvalidProductReferenceError,
    InvalidTaxRateError,
)
from pos_kernel.logging_config import get_logger

logger = get_logger("invoicing.catalog")

# First key present wins
_PRODUCT_ID_KEYS = ("id", "product_id", "_id")
_PRODUCT_NAME_KEYS = ("name", "product_name")
_PRICE_KEYS = ("unit_price", "unitPrice", "price", "sales_price", "selling_price")
_TAX_RATE_KEYS = ("tax_rate_percent", "taxRatePercent", "tax_rate", "tax", "gst_rate", "tax_percent")
_SKU_KEYS = ("sku", "product_sku")
_HSN_KEYS = ("hsn_code", "hsnCode", "hsn")


def _first(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class ProductRef:
    """A selectable product, as supplied by the catalog collaborator."""

    id: str
    name: str
    unit_price: Money
    tax_rate_percent: Decimal = ZERO
    sku: str | None = None
    hsn_code: str | None = None
    category: str | None = None

    def __post_init__(self) -> None:
        if not self.id or not str(self.id).strip():
            raise InvalidProductReferenceError("product id is required")
        object.__setattr__(self, "id", str(self.id).strip())
        if not self.name or not self.name.strip():
            raise InvalidProductReferenceError("product name is required", self.id)
        if self.unit_price.is_negative:
            logger.warning("product_negative_price_rejected", extra={
                "product_id": self.id,
                "unit_price": str(self.unit_price.amount),
            })
            raise InvalidPriceError(self.id, str(self.unit_price.amount))
        if not isinstance(self.tax_rate_percent, Decimal):
            object.__setattr__(self, "tax_rate_percent", to_decimal(self.tax_rate_percent))
        if self.tax_rate_percent < ZERO:
            raise InvalidTaxRateError(str(self.tax_rate_percent), self.id)

    @classmethod
    def from_record(cls, record: Mapping[str, Any], currency: Currency | str) -> ProductRef:
        """
        Normalize a raw catalog record.

        Price and tax rate accept several field spellings; a missing tax rate
        means untaxed.

        Raises:
            InvalidProductReferenceError: id/name missing or price unparseable
            InvalidPriceError: negative price
            InvalidTaxRateError: negative tax rate
        """
        product_id = _optional_str(_first(record, _PRODUCT_ID_KEYS))
        raw_price = _first(record, _PRICE_KEYS)
        if raw_price is None:
            raise InvalidProductReferenceError("unit price is required", product_id)
        try:
            price = to_decimal(raw_price)
            tax_rate = to_decimal(_first(record, _TAX_RATE_KEYS), default=ZERO)
        except ValueError as e:
            raise InvalidProductReferenceError(str(e), product_id) from e

        return cls(
            id=product_id or "",
            name=_optional_str(_first(record, _PRODUCT_NAME_KEYS)) or "",
            unit_price=Money.of(price, currency),
            tax_rate_percent=tax_rate,
            sku=_optional_str(_first(record, _SKU_KEYS)),
            hsn_code=_optional_str(_first(record, _HSN_KEYS)),
            category=_optional_str(record.get("category")),
        )

    def matches(self, query: str) -> bool:
        needle = query.strip().lower()
        return any(
            needle in value.lower()
            for value in (self.name, self.sku, self.hsn_code, self.category)
            if value
        )


@dataclass(frozen=True)
class CustomerRef:
    """A selectable customer."""

    id: str
    name: str
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    gstin: str | None = None

    def __post_init__(self) -> None:
        if not self.id or not str(self.id).strip():
            raise InvalidCustomerReferenceError("customer id is required")
        object.__setattr__(self, "id", str(self.id).strip())
        if not self.name or not self.name.strip():
            raise InvalidCustomerReferenceError("customer name is required", self.id)

    @property
    def display_name(self) -> str:
        """Billing name: company when present, else the person's name."""
        return self.company or self.name

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> CustomerRef:
        return cls(
            id=_optional_str(_first(record, ("id", "customer_id", "_id"))) or "",
            name=_optional_str(_first(record, ("name", "customer_name"))) or "",
            company=_optional_str(_first(record, ("company", "company_name"))),
            email=_optional_str(record.get("email")),
            phone=_optional_str(_first(record, ("phone", "mobile", "whatsapp_number"))),
            gstin=_optional_str(_first(record, ("gstin", "gst_number"))),
        )

    def matches(self, query: str) -> bool:
        needle = query.strip().lower()
        return any(
            needle in value.lower()
            for value in (self.name, self.company, self.gstin)
            if value
        )


@dataclass(frozen=True)
class VendorIdentity:
    """The biller: the logged-in vendor's profile."""

    vendor_id: str
    name: str
    shop_name: str | None = None
    gst_number: str | None = None

    @property
    def biller_name(self) -> str:
        return self.shop_name or self.name

    @property
    def is_complete(self) -> bool:
        return bool(self.vendor_id and self.vendor_id.strip() and self.biller_name.strip())

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> VendorIdentity:
        return cls(
            vendor_id=_optional_str(_first(record, ("vendor_id", "id"))) or "",
            name=_optional_str(record.get("name")) or "",
            shop_name=_optional_str(record.get("shop_name")),
            gst_number=_optional_str(record.get("gst_number")),
        )


@dataclass(frozen=True)
class ProductCatalog:
    """Immutable snapshot of one catalog fetch."""

    products: tuple[ProductRef, ...] = ()
    _by_id: dict[str, ProductRef] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {p.id: p for p in self.products})

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        currency: Currency | str,
    ) -> ProductCatalog:
        """Build a snapshot; any unusable record fails the whole snapshot."""
        products = tuple(ProductRef.from_record(r, currency) for r in records)
        logger.info("product_catalog_loaded", extra={"product_count": len(products)})
        return cls(products=products)

    def __len__(self) -> int:
        return len(self.products)

    def get(self, product_id: str) -> ProductRef | None:
        return self._by_id.get(str(product_id))

    def search(self, query: str = "") -> tuple[ProductRef, ...]:
        """Products whose name, SKU, HSN code or category contain ``query``."""
        if not query or not query.strip():
            return self.products
        return tuple(p for p in self.products if p.matches(query))


@dataclass(frozen=True)
class CustomerDirectory:
    """Immutable snapshot of one customer fetch."""

    customers: tuple[CustomerRef, ...] = ()

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> CustomerDirectory:
        customers = tuple(CustomerRef.from_record(r) for r in records)
        logger.info("customer_directory_loaded", extra={"customer_count": len(customers)})
        return cls(customers=customers)

    def get(self, customer_id: str) -> CustomerRef | None:
        for customer in self.customers:
            if customer.id == str(customer_id):
                return customer
        return None

    def search(self, query: str = "") -> tuple[CustomerRef, ...]:
        """Customers whose name, company or GSTIN contain ``query``."""
        if not query or not query.strip():
            return self.customers
        return tuple(c for c in self.customers if c.matches(query))
