"""Derived views and export package."""

from fintrack.reports.derivation import (
    DEFAULT_DATE_FORMAT,
    aggregate_totals,
    available_months,
    build_view,
    export_rows,
    filter_by_month,
    format_amount,
    report_by_category,
)
from fintrack.reports.export import (
    EXPORT_HEADER,
    export_csv_text,
    export_to_directory,
    rows_to_frame,
    write_csv,
)

__all__ = [
    "DEFAULT_DATE_FORMAT",
    "EXPORT_HEADER",
    "aggregate_totals",
    "available_months",
    "build_view",
    "export_csv_text",
    "export_rows",
    "export_to_directory",
    "filter_by_month",
    "format_amount",
    "report_by_category",
    "rows_to_frame",
    "write_csv",
]
