"""
Tests for invoice settings (pos_config).

Covers:
- Bundled defaults via get_active_settings()
- YAML files and overrides
- Validation failures raise InvalidSettingsError
- POS_CONFIG_TRACE emitted on load
"""

from decimal import Decimal

import pytest
import yaml

from pos_config import InvoiceSettings, PaymentMode, PaymentStatus, get_active_settings
from pos_config.loader import compute_checksum, load_yaml_file, parse_settings, settings_section
from pos_kernel.exceptions import InvalidSettingsError


def write_yaml(path, data) -> None:
    path.write_text(yaml.safe_dump(data))


class TestDefaults:
    """Bundled default settings."""

    def test_bundled_file_matches_dataclass_defaults(self):
        assert get_active_settings() == InvoiceSettings.with_defaults()

    def test_default_values(self):
        settings = get_active_settings()
        assert settings.currency == "INR"
        assert settings.round_off_enabled is False
        assert settings.default_tax_inclusive is False
        assert settings.max_discount_percent == Decimal("100")
        assert settings.default_payment_status is PaymentStatus.PENDING
        assert settings.default_payment_mode is PaymentMode.CASH
        assert settings.omit_cash_payment_mode is True
        assert settings.suppress_zero_rate_in_breakdown is True

    def test_overrides(self):
        settings = get_active_settings(overrides={"round_off_enabled": True})
        assert settings.round_off_enabled is True
        assert settings.currency == "INR"

    def test_trace_logged(self, captured_logs):
        get_active_settings(overrides={"currency": "USD"})

        traces = [r for r in captured_logs() if r["message"] == "POS_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["currency"] == "USD"
        assert traces[0]["override_keys"] == ["currency"]
        assert len(traces[0]["checksum"]) == 64


class TestYamlFiles:
    """Settings loaded from a vendor's file."""

    def test_nested_section(self, tmp_path):
        path = tmp_path / "vendor.yaml"
        write_yaml(path, {"invoice": {"currency": "usd", "round_off_enabled": True}})

        settings = get_active_settings(config_path=path)
        assert settings.currency == "USD"
        assert settings.round_off_enabled is True

    def test_top_level_section(self, tmp_path):
        path = tmp_path / "vendor.yaml"
        write_yaml(path, {"max_discount_percent": "50"})

        assert get_active_settings(config_path=path).max_discount_percent == Decimal("50")

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert get_active_settings(config_path=path) == InvoiceSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_settings(config_path=tmp_path / "nope.yaml")

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InvalidSettingsError):
            load_yaml_file(path)

    def test_non_mapping_section(self):
        with pytest.raises(InvalidSettingsError):
            settings_section({"invoice": ["x"]})


class TestValidation:
    """InvoiceSettings rejects bad values."""

    def test_unknown_currency(self):
        with pytest.raises(InvalidSettingsError) as exc_info:
            InvoiceSettings(currency="XXY")
        assert exc_info.value.field == "currency"

    @pytest.mark.parametrize("value", ["-1", "101", "abc"])
    def test_bad_max_discount(self, value):
        with pytest.raises(InvalidSettingsError):
            InvoiceSettings(max_discount_percent=value)

    def test_unknown_payment_status(self):
        with pytest.raises(InvalidSettingsError):
            InvoiceSettings(default_payment_status="refunded")

    def test_unknown_payment_mode(self):
        with pytest.raises(InvalidSettingsError):
            InvoiceSettings(default_payment_mode="cheque")

    def test_non_boolean_flag(self):
        with pytest.raises(InvalidSettingsError):
            InvoiceSettings(round_off_enabled="yes")

    def test_unknown_key(self):
        with pytest.raises(InvalidSettingsError) as exc_info:
            parse_settings({"invoice": {"theme": "dark"}})
        assert exc_info.value.field == "theme"


class TestSerialization:
    """to_dict and checksums."""

    def test_round_trip_through_dict(self):
        settings = InvoiceSettings(currency="EUR", default_payment_mode="card")
        assert InvoiceSettings.from_dict(settings.to_dict()) == settings

    def test_checksum_is_key_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
