"""
quoting_config -- YAML-driven report configuration.

Responsibility:
    Provides ``get_reporting_config()``, the way services obtain a
    ``ReportingConfig`` from a YAML file (or the shipped defaults).

Architecture position:
    Configuration -- sits above ``quoting_modules.reporting.config`` (the
    schema).  The kernel and engines MUST NEVER import from
    ``quoting_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested YAML file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every ``get_reporting_config()`` call emits a ``reporting_config_loaded``
    log entry with the source path and the checksum of the raw YAML data.
"""

from __future__ import annotations

from pathlib import Path

from quoting_config.loader import (
    DEFAULT_REPORTING_PATH,
    compute_checksum,
    load_reporting_config,
    load_yaml_file,
    parse_reporting_config,
)
from quoting_kernel.logging_config import get_logger
from quoting_modules.reporting.config import ReportingConfig

logger = get_logger("config")


def get_reporting_config(path: Path | str | None = None) -> ReportingConfig:
    """Load and validate the reporting configuration."""
    source = Path(path or DEFAULT_REPORTING_PATH)
    data = load_yaml_file(source)
    config = parse_reporting_config(data)
    logger.info(
        "reporting_config_loaded",
        extra={"path": str(source), "checksum": compute_checksum(data)},
    )
    return config


__all__ = [
    "get_reporting_config",
    "load_reporting_config",
    "load_yaml_file",
    "parse_reporting_config",
    "compute_checksum",
    "DEFAULT_REPORTING_PATH",
]
