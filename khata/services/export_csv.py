"""CSV export for report tables."""

import csv
from pathlib import Path
from typing import Callable

from khata.models.reports import Report
from khata.utils.formatting import format_date


def report_filename(report: Report) -> str:
    """Default file name, e.g. ``daybook_report.csv``."""
    return f"{report.tab.value}_report.csv"


def export_report_csv(
    *,
    report: Report,
    output_path: Path,
    date_format: Callable[[int], str] = format_date,
) -> Path:
    """Write a report to CSV at `output_path`.

    The first line holds the report headers; each row follows in report
    order. Returns the path written.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(report.headers)
        for row in report.rows:
            writer.writerow(row.cells(date_format))

    return output_path
