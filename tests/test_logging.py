"""Tests for structured logging (pos_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from pos_config import PaymentMode
from pos_kernel.domain.values import Money
from pos_kernel.exceptions import InvalidQuantityError, ValidationError
from pos_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


class JsonStream:
    """A StringIO-backed handler whose output is read back as JSON records."""

    def __init__(self):
        self.buffer = StringIO()
        self.handler = logging.StreamHandler(self.buffer)

    def records(self) -> list[dict]:
        return [json.loads(line) for line in self.buffer.getvalue().splitlines() if line]

    def first(self) -> dict:
        return self.records()[0]


@pytest.fixture
def out() -> JsonStream:
    stream = JsonStream()
    configure_logging(handler=stream.handler)
    return stream


class TestRecordShape:
    """Fields every record carries."""

    def test_core_fields(self, out):
        get_logger("invoicing.aggregate").info("invoice_cleared")

        record = out.first()
        assert record["message"] == "invoice_cleared"
        assert record["level"] == "INFO"
        assert record["logger"] == "pos_kernel.invoicing.aggregate"
        assert record["ts"].endswith("+00:00")

    def test_extra_fields(self, out):
        get_logger("t").info("invoice_item_added", extra={"quantity": 2, "line_id": "l-1"})

        record = out.first()
        assert (record["quantity"], record["line_id"]) == (2, "l-1")

    def test_formatter_is_structured(self, out):
        assert isinstance(out.handler.formatter, StructuredFormatter)

    def test_debug_suppressed_at_default_level(self, out):
        logger = get_logger("t")
        logger.debug("hidden")
        logger.info("shown")
        logger.warning("also_shown")

        assert [r["message"] for r in out.records()] == ["shown", "also_shown"]


class TestValueEncoding:
    """Non-JSON values in ``extra``."""

    def test_decimal_as_string(self, out):
        get_logger("t").info("m", extra={"tax_rate_percent": Decimal("18.00")})
        assert out.first()["tax_rate_percent"] == "18.00"

    def test_uuid_as_string(self, out):
        line_id = uuid4()
        get_logger("t").info("m", extra={"line_uuid": line_id})
        assert out.first()["line_uuid"] == str(line_id)

    def test_money_as_amount_and_currency(self, out):
        get_logger("t").info("m", extra={"grand_total": Money.of("212.40", "INR")})
        assert out.first()["grand_total"] == {"amount": "212.40", "currency": "INR"}

    def test_enum_as_value(self, out):
        get_logger("t").info("m", extra={"payment_mode": PaymentMode.BANK})
        assert out.first()["payment_mode"] == "bank"


class TestExceptionFields:
    """exc_info is flattened into exc_* fields."""

    def test_plain_exception(self, out):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("t").error("failed", exc_info=True)

        record = out.first()
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record
        assert "Traceback" in record["traceback"]

    def test_kernel_error_attributes(self, out):
        try:
            raise InvalidQuantityError(0, "p-pen")
        except InvalidQuantityError:
            get_logger("t").error("add_failed", exc_info=True)

        record = out.first()
        assert record["exc_code"] == "INVALID_QUANTITY"
        assert record["exc_quantity"] == 0
        assert record["exc_product_id"] == "p-pen"

    def test_validation_reasons(self, out):
        try:
            raise ValidationError(["invoice has no line items"])
        except ValidationError:
            get_logger("t").warning("rejected", exc_info=True)

        assert out.first()["exc_reasons"] == ["invoice has no line items"]


class TestLogContext:
    """Session-scoped context fields."""

    def test_fields_added_to_records(self, out):
        LogContext.set(session_id="s-1", vendor_id="v-9")
        get_logger("t").info("m")

        record = out.first()
        assert record["session_id"] == "s-1"
        assert record["vendor_id"] == "v-9"
        assert "invoice_id" not in record

    def test_set_merges(self):
        LogContext.set(session_id="x")
        LogContext.set(invoice_id="y", session_id=None)
        assert LogContext.get_all() == {"session_id": "x", "invoice_id": "y"}

    def test_clear(self):
        LogContext.set(actor_id="a")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_value(self):
        LogContext.set(invoice_id="outer")
        with LogContext.bind(invoice_id="inner", trace_id="t-1"):
            assert LogContext.get_all() == {"invoice_id": "inner", "trace_id": "t-1"}
        assert LogContext.get_all() == {"invoice_id": "outer"}

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(session_id="s"):
                raise RuntimeError
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(customer_id="c-1")

    def test_values_stringified(self):
        LogContext.set(invoice_id=41)
        assert LogContext.get_all() == {"invoice_id": "41"}


class TestConfigureLogging:
    """Initialization."""

    def test_idempotent(self):
        first = logging.StreamHandler(StringIO())
        configure_logging(handler=first)
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert logging.getLogger("pos_kernel").handlers == [first]

    def test_does_not_propagate(self, out):
        assert logging.getLogger("pos_kernel").propagate is False

    def test_reset_detaches_handlers(self, out):
        reset_logging()
        assert logging.getLogger("pos_kernel").handlers == []

    def test_level_from_name(self):
        stream = JsonStream()
        configure_logging(handler=stream.handler, level="DEBUG")
        get_logger("engines.line_item").debug("line_item_calculated")
        assert stream.first()["logger"] == "pos_kernel.engines.line_item"
