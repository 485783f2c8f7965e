"""
Typed Exception Hierarchy for the Quoting Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Report generation must distinguish "the caller asked for something
impossible" from "the data is incomplete".  Generic exceptions like
ValueError force callers to parse error messages.  Every error here:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        report = build_period_report(...)
    except InvalidDateRangeError as e:
        api_response(code=e.code, start=e.start_date, end=e.end_date)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from QuotingError:

    QuotingError (base)
    |
    +-- ValuationError
    |   +-- MissingValuationDataError
    |   +-- CatalogItemNotFoundError
    |
    +-- ReportError
    |   +-- InvalidDateRangeError
    |   +-- MissingReportInputError
    |
    +-- ExportError
        +-- ReportExportError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                     | When Raised
------------|--------------------------|--------------------------------------------
Valuation   | MISSING_VALUATION_DATA   | unwrap() of a "no data" resolution
            | CATALOG_ITEM_NOT_FOUND   | Recorder asked to update an unknown item
------------|--------------------------|--------------------------------------------
Report      | INVALID_DATE_RANGE       | start_date is after end_date
            | MISSING_REPORT_INPUT     | A required collaborator sequence is None
------------|--------------------------|--------------------------------------------
Export      | REPORT_EXPORT_FAILED     | CSV formatting of a built report failed

===============================================================================
HANDLING PATTERNS
===============================================================================

1. PARTIAL DATA IS NOT AN ERROR.  The engines never raise
   MissingValuationDataError while building a report; a line without a
   cost basis degrades to "cost unknown" and the report records its
   reduced precision.  The exception exists for callers that explicitly
   demand a value (``Resolution.unwrap()``).

2. STRUCTURAL ERRORS FAIL FAST.  InvalidDateRangeError and
   MissingReportInputError are raised before any computation happens.

3. EXPORT FAILURES ARE ISOLATED.  ReportExportError never invalidates the
   PeriodReport it was given; the report can still be displayed.
"""

from datetime import date


class QuotingError(Exception):
    """
    Base exception for all quoting kernel errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "QUOTING_ERROR"


# Valuation-related exceptions


class ValuationError(QuotingError):
    """Base exception for valuation resolution errors."""

    code: str = "VALUATION_ERROR"


class MissingValuationDataError(ValuationError):
    """No snapshot and no live record exist for an entity on a date."""

    code: str = "MISSING_VALUATION_DATA"

    def __init__(self, entity_id: str, target_date: date):
        self.entity_id = entity_id
        self.target_date = target_date
        super().__init__(
            f"No valuation data for {entity_id} as of {target_date.isoformat()}"
        )


class CatalogItemNotFoundError(ValuationError):
    """Catalog item with given id does not exist for the tenant."""

    code: str = "CATALOG_ITEM_NOT_FOUND"

    def __init__(self, tenant_id: str, item_id: str):
        self.tenant_id = tenant_id
        self.item_id = item_id
        super().__init__(f"Catalog item not found: {item_id} (tenant {tenant_id})")


# Report-related exceptions


class ReportError(QuotingError):
    """Base exception for report generation errors."""

    code: str = "REPORT_ERROR"


class InvalidDateRangeError(ReportError):
    """Report window start is after its end."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Invalid report window: start {start_date.isoformat()} "
            f"is after end {end_date.isoformat()}"
        )


class MissingReportInputError(ReportError):
    """A required collaborator input was not supplied."""

    code: str = "MISSING_REPORT_INPUT"

    def __init__(self, input_name: str):
        self.input_name = input_name
        super().__init__(f"Required report input missing: {input_name}")


# Export-related exceptions


class ExportError(QuotingError):
    """Base exception for report export errors."""

    code: str = "EXPORT_ERROR"


class ReportExportError(ExportError):
    """Formatting a built report for download failed."""

    code: str = "REPORT_EXPORT_FAILED"

    def __init__(self, export_format: str, reason: str):
        self.export_format = export_format
        self.reason = reason
        super().__init__(f"Failed to export report as {export_format}: {reason}")
