"""
Settings Loader (``pos_config.loader``).

Loads a YAML settings document and parses it into ``InvoiceSettings``.
Callers should go through ``pos_config.get_active_settings()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Document that is not a mapping, or fails validation
  -> ``InvalidSettingsError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from pos_config.schema import InvoiceSettings
from pos_kernel.exceptions import InvalidSettingsError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidSettingsError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidSettingsError("<document>", f"expected a mapping in {path}")
    return data


def settings_section(data: dict[str, Any]) -> dict[str, Any]:
    """Settings may sit at the top level or under an ``invoice`` key."""
    section = data.get("invoice", data)
    if not isinstance(section, dict):
        raise InvalidSettingsError("invoice", "expected a mapping")
    return dict(section)


def parse_settings(data: dict[str, Any]) -> InvoiceSettings:
    """Parse ``InvoiceSettings`` from a loaded document."""
    return InvoiceSettings.from_dict(settings_section(data))


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 checksum of a settings document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
