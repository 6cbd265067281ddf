"""CSV export of transactions, payouts and other API records."""

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from paydesk.config import settings
from paydesk.errors import PaydeskError
from paydesk.utils.logging import get_logger

logger = get_logger("paydesk.export", settings.log_level)

DATE_KEY_MARKERS = ("_at", "_date")
DATE_FORMAT = "%d/%m/%Y, %I:%M:%S %p"


def _as_row(record: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump()
    return dict(record)


def format_date_value(value: Any) -> Any:
    """Render datetimes and ISO-8601 strings in a readable local style.

    Values that are not dates are returned unchanged.
    """
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        return parsed.strftime(DATE_FORMAT)
    return value


def records_to_csv(records: Iterable[Mapping[str, Any] | BaseModel]) -> str:
    """Serialize records to CSV text.

    The header row is the keys of the first record. Missing and None values
    become empty cells, values under ``*_at`` / ``*_date`` keys are
    formatted as dates, and cells containing commas or quotes are quoted.

    Returns:
        The CSV text, or "" when there are no records
    """
    rows = [_as_row(record) for record in records]
    if not rows:
        return ""

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(headers)

    for row in rows:
        cells = []
        for header in headers:
            value = row.get(header)
            if value is None:
                cells.append("")
                continue
            if any(marker in header for marker in DATE_KEY_MARKERS):
                value = format_date_value(value)
            cells.append(value)
        writer.writerow(cells)

    return buffer.getvalue().rstrip("\n")


def export_csv(
    records: Iterable[Mapping[str, Any] | BaseModel],
    path: Path | str | None = None,
    filename: str = "transactions.csv",
) -> Path:
    """Write records to a CSV file.

    Args:
        records: Rows to export
        path: Target file; defaults to ``filename`` under ``settings.exports_dir``
        filename: File name used when ``path`` is not given

    Returns:
        The path written

    Raises:
        PaydeskError: If there is nothing to export
    """
    rows = list(records)
    if not rows:
        raise PaydeskError("No data to export")

    target = Path(path) if path else settings.exports_dir / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(records_to_csv(rows), encoding="utf-8")

    logger.info(f"Exported {len(rows)} records to {target}")
    return target
