"""
CSV exporter for period reports.

Writes one row per quote of the report window with csv.writer.  Pure
formatting: no business logic, no I/O beyond the in-memory buffer.
Columns with no data (margins of orders without a complete cost
breakdown) render as empty cells, never as zero.

Failures are wrapped in ReportExportError; the PeriodReport given to the
exporter is never modified and stays displayable.
"""

from __future__ import annotations

import csv
import io
from decimal import Decimal

from quoting_kernel.exceptions import ReportExportError
from quoting_kernel.logging_config import get_logger
from quoting_modules.reporting.models import PeriodReport

logger = get_logger("modules.reporting.export")

CSV_COLUMNS = (
    "quote_id",
    "emission_date",
    "client_name",
    "status",
    "total_value",
    "material_margin",
    "labor_margin",
    "total_margin",
)

_BOM = "\ufeff"


def _money(value: Decimal | None, precision: int) -> str:
    if value is None:
        return ""
    return str(value.quantize(Decimal(1).scaleb(-precision)))


def export_to_csv(
    report: PeriodReport,
    *,
    delimiter: str = ",",
    include_bom: bool = False,
    precision: int = 2,
) -> bytes:
    """
    Serialize a report's orders to UTF-8 CSV bytes.

    Args:
        report: The report to export.
        delimiter: Field separator.
        include_bom: Prefix a UTF-8 byte order mark (for spreadsheet apps).
        precision: Decimal places of monetary columns.

    Raises:
        ReportExportError: If any row cannot be formatted.
    """
    buffer = io.StringIO()
    try:
        writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\r\n")
        writer.writerow(CSV_COLUMNS)
        for order in report.orders:
            writer.writerow(
                (
                    order.quote_id,
                    order.emission_date.isoformat(),
                    order.client_name,
                    order.status.value,
                    _money(order.total_value, precision),
                    _money(order.material_margin, precision),
                    _money(order.labor_margin, precision),
                    _money(order.total_margin, precision),
                )
            )
    except (csv.Error, ArithmeticError, AttributeError, TypeError, ValueError) as exc:
        logger.error(
            "report_export_failed",
            extra={"export_format": "csv", "error": str(exc)},
        )
        raise ReportExportError("csv", str(exc)) from exc

    text = buffer.getvalue()
    if include_bom:
        text = _BOM + text
    logger.info(
        "report_exported",
        extra={"export_format": "csv", "row_count": len(report.orders)},
    )
    return text.encode("utf-8")
