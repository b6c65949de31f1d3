"""
Typed Exception Hierarchy for the Point-of-Sale Invoicing Core.

Every error has a TYPED exception class, a class-level CODE attribute
(machine-readable, API-safe) and carries structured DATA as attributes,
so callers catch by type and read fields instead of parsing messages:

    try:
        payload = build_payload(aggregate, customer, vendor)
    except ValidationError as e:
        show_blocking_error(e.code, e.reasons)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PosKernelError (base)
    |
    +-- LineItemError
    |   +-- InvalidQuantityError
    |   +-- InvalidDiscountPercentError
    |   +-- InvalidTaxRateError
    |   +-- LineItemNotFoundError
    |
    +-- CatalogError
    |   +-- InvalidPriceError
    |   +-- InvalidProductReferenceError
    |   +-- InvalidCustomerReferenceError
    |
    +-- InvoiceError
    |   +-- ValidationError
    |   +-- InvoiceHydrationError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- ConfigError
        +-- InvalidSettingsError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                        | When Raised
-----------|-----------------------------|----------------------------------------
Line item  | INVALID_QUANTITY            | Quantity < 1 on add or line construction
           | INVALID_DISCOUNT_PERCENT    | Line constructed with pct outside [0,100]
           | INVALID_TAX_RATE            | Negative tax rate
           | LINE_ITEM_NOT_FOUND         | Update on a line id not in the invoice
-----------|-----------------------------|----------------------------------------
Catalog    | INVALID_PRICE               | Negative unit price at ingestion
           | INVALID_PRODUCT_REFERENCE   | Product record without id/name
           | INVALID_CUSTOMER_REFERENCE  | Customer record without id/name
-----------|-----------------------------|----------------------------------------
Invoice    | VALIDATION_ERROR            | Payload preconditions failed
           | INVOICE_HYDRATION_FAILED    | Persisted invoice cannot be loaded
-----------|-----------------------------|----------------------------------------
Currency   | INVALID_CURRENCY            | Not a known ISO 4217 code
           | CURRENCY_MISMATCH           | Mixed currencies in one operation
-----------|-----------------------------|----------------------------------------
Config     | INVALID_SETTINGS            | Settings document fails validation

Per-line input errors reject one operation and leave the rest of the
invoice untouched. Payload errors are blocking: the caller must resolve
them before the network submission is attempted. Nothing here is fatal
to the process.
"""


class PosKernelError(Exception):
    """
    Base exception for all invoicing core errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "POS_KERNEL_ERROR"


# Line item exceptions


class LineItemError(PosKernelError):
    """Base exception for line item input errors."""

    code: str = "LINE_ITEM_ERROR"


class InvalidQuantityError(LineItemError):
    """Quantity is below the floor of 1."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: int, product_id: str | None = None):
        self.quantity = quantity
        self.product_id = product_id
        super().__init__(f"Quantity must be at least 1, got {quantity}")


class InvalidDiscountPercentError(LineItemError):
    """Discount percent outside [0, 100]."""

    code: str = "INVALID_DISCOUNT_PERCENT"

    def __init__(self, discount_percent: str):
        self.discount_percent = discount_percent
        super().__init__(
            f"Discount percent must be between 0 and 100, got {discount_percent}"
        )


class InvalidTaxRateError(LineItemError):
    """Tax rate is negative."""

    code: str = "INVALID_TAX_RATE"

    def __init__(self, tax_rate_percent: str, product_id: str | None = None):
        self.tax_rate_percent = tax_rate_percent
        self.product_id = product_id
        super().__init__(f"Tax rate cannot be negative, got {tax_rate_percent}")


class LineItemNotFoundError(LineItemError):
    """No line with the given id exists on the invoice."""

    code: str = "LINE_ITEM_NOT_FOUND"

    def __init__(self, line_id: str):
        self.line_id = line_id
        super().__init__(f"Line item not found: {line_id}")


# Catalog exceptions


class CatalogError(PosKernelError):
    """Base exception for catalog reference ingestion errors."""

    code: str = "CATALOG_ERROR"


class InvalidPriceError(CatalogError):
    """Unit price is negative."""

    code: str = "INVALID_PRICE"

    def __init__(self, product_id: str | None, unit_price: str):
        self.product_id = product_id
        self.unit_price = unit_price
        subject = f"product {product_id}" if product_id else "line item"
        super().__init__(f"Unit price cannot be negative for {subject}: {unit_price}")


class InvalidProductReferenceError(CatalogError):
    """Product record is missing required fields or holds unusable values."""

    code: str = "INVALID_PRODUCT_REFERENCE"

    def __init__(self, reason: str, product_id: str | None = None):
        self.reason = reason
        self.product_id = product_id
        super().__init__(f"Invalid product reference {product_id}: {reason}")


class InvalidCustomerReferenceError(CatalogError):
    """Customer record is missing required fields."""

    code: str = "INVALID_CUSTOMER_REFERENCE"

    def __init__(self, reason: str, customer_id: str | None = None):
        self.reason = reason
        self.customer_id = customer_id
        super().__init__(f"Invalid customer reference {customer_id}: {reason}")


# Invoice exceptions


class InvoiceError(PosKernelError):
    """Base exception for invoice-level errors."""

    code: str = "INVOICE_ERROR"


class ValidationError(InvoiceError):
    """
    Invoice payload preconditions failed.

    Carries every failed precondition so the caller can report them together.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, reasons: list[str]):
        self.reasons = list(reasons)
        super().__init__("Invoice validation failed: " + "; ".join(self.reasons))


class InvoiceHydrationError(InvoiceError):
    """A persisted invoice record cannot be loaded into an editing session."""

    code: str = "INVOICE_HYDRATION_FAILED"

    def __init__(self, reason: str, invoice_id: str | None = None):
        self.reason = reason
        self.invoice_id = invoice_id
        super().__init__(f"Cannot load invoice {invoice_id}: {reason}")


# Currency exceptions


class CurrencyError(PosKernelError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a known ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: {currency}")


class CurrencyMismatchError(CurrencyError):
    """Operation mixes two currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, left: str, right: str, operation: str):
        self.left = left
        self.right = right
        self.operation = operation
        super().__init__(
            f"Cannot {operation} Money with different currencies: {left} and {right}"
        )


# Configuration exceptions


class ConfigError(PosKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidSettingsError(ConfigError):
    """Settings document failed validation."""

    code: str = "INVALID_SETTINGS"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid setting '{field}': {reason}")
