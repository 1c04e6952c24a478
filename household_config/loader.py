"""
Configuration Loader (``household_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a frozen
``household_config.schema.LedgerSettings``.  The single public entry point
for runtime config is ``household_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

import yaml

from household_config.schema import LedgerSettings

_KNOWN_KEYS = frozenset(f.name for f in fields(LedgerSettings))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """Parse LedgerSettings from a dict, rejecting unknown keys."""
    ledger = data.get("ledger", data)
    if not isinstance(ledger, dict):
        raise ValueError("'ledger' section must be a mapping")
    unknown = set(ledger) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
    return LedgerSettings(**ledger)


def compute_checksum(settings: LedgerSettings) -> str:
    """Deterministic SHA-256 over the settings, for change detection."""
    canonical = json.dumps(asdict(settings), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
