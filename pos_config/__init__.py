"""
pos_config -- single public entrypoint for invoice settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``. The returned ``InvoiceSettings`` is passed
    explicitly to the invoice aggregate and payload builder.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``InvalidSettingsError`` -- a value fails validation.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``POS_CONFIG_TRACE`` log entry with the source path and checksum.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pos_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_settings,
    settings_section,
)
from pos_config.schema import InvoiceSettings, PaymentMode, PaymentStatus
from pos_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default settings document
_DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_settings(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> InvoiceSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: YAML settings file (defaults to the bundled
            ``sets/default.yaml``).
        overrides: Values applied on top of the file, e.g. a vendor's
            round-off toggle.

    Returns:
        Validated, frozen ``InvoiceSettings``.
    """
    path = config_path or _DEFAULT_SETTINGS_PATH
    data = load_yaml_file(path)
    section = settings_section(data)
    if overrides:
        section.update(overrides)

    settings = parse_settings({"invoice": section})

    _logger.info(
        "POS_CONFIG_TRACE",
        extra={
            "trace_type": "POS_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": compute_checksum(section),
            "currency": settings.currency,
            "round_off_enabled": settings.round_off_enabled,
            "override_keys": sorted(overrides) if overrides else [],
        },
    )
    return settings


__all__ = [
    "InvoiceSettings",
    "PaymentMode",
    "PaymentStatus",
    "get_active_settings",
]
