"""
Reporting configuration loader (``quoting_config.loader``).

Reads a flat YAML mapping whose keys are the fields of ``ReportingConfig``::

    ranking_size: 10
    proration_method: daily
    proration_days_per_month: 30
    csv_delimiter: ";"

Keys left out keep their defaults.  A misspelt key is an error rather than
a silently ignored line, since a typo in ``proration_method`` would
otherwise change every net-profit figure without notice.

Errors:
    FileNotFoundError and yaml.YAMLError propagate from reading the file.
    ValueError for a non-mapping document, unknown keys or invalid values.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from quoting_modules.reporting.config import ReportingConfig

DEFAULTS_DIR = Path(__file__).parent / "defaults"
DEFAULT_REPORTING_PATH = DEFAULTS_DIR / "reporting.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Top-level mapping of a YAML file; an empty file gives ``{}``."""
    with open(path, encoding="utf-8") as fh:
        document = yaml.safe_load(fh)
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(
            f"{path}: expected a mapping of reporting options, got {type(document).__name__}"
        )
    return document


def parse_reporting_config(data: dict[str, Any]) -> ReportingConfig:
    allowed = {f.name for f in dataclasses.fields(ReportingConfig)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"Unknown reporting config keys: {', '.join(unknown)}")
    return ReportingConfig.from_dict(dict(data))


def load_reporting_config(path: Path | str | None = None) -> ReportingConfig:
    """Load a ``ReportingConfig`` from YAML (the shipped defaults if no path)."""
    return parse_reporting_config(load_yaml_file(Path(path or DEFAULT_REPORTING_PATH)))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the options, independent of key order, for change detection in logs."""
    text = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
