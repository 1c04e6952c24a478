"""
household_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files directly.

Architecture position:
    Configuration -- sits beside ``household_kernel`` and below
    ``household_services``.  The kernel MUST NEVER import from
    ``household_config``; the service layer passes plain values down.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``LEDGER_CONFIG_TRACE`` log entry with the config id and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from household_config.loader import compute_checksum, load_yaml_file, parse_settings
from household_config.schema import MAX_MEMBERS_LIMIT, LedgerSettings

_logger = logging.getLogger("household_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(config_path: Path | str | None = None) -> LedgerSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to the bundled
            ``defaults.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file holds unknown keys or invalid values.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    settings = parse_settings(load_yaml_file(path))

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_id": settings.config_id,
            "checksum": compute_checksum(settings),
            "config_path": str(path),
        },
    )
    return settings


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "LedgerSettings",
    "MAX_MEMBERS_LIMIT",
    "get_active_config",
]
