"""Bank statement CSV parsing.

Accepts a header row and maps the common column spellings onto
``date``, ``description`` and ``amount``.
"""
from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any

from ledger_categorizer.errors import ValidationError
from ledger_categorizer.models import to_naive_utc

DATE_COLUMNS = ("date", "Date", "TransactionDate")
DESCRIPTION_COLUMNS = ("description", "Description", "Narrative")
AMOUNT_COLUMNS = ("amount", "Amount", "Value")

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y", "%d.%m.%Y")


def _first_value(row: dict[str, str], columns: tuple[str, ...]) -> str | None:
    for column in columns:
        value = row.get(column)
        if value is not None and value.strip():
            return value.strip()
    return None


def parse_statement_date(value: str) -> datetime:
    try:
        return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognised date {value!r}")


def parse_amount(value: str) -> float:
    cleaned = value.replace(",", "").replace(" ", "")
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = f"-{cleaned[1:-1]}"
    return float(cleaned)


def parse_bank_statement(content: str) -> list[dict[str, Any]]:
    """Parse CSV text into transaction field dicts. Blank lines are skipped."""
    if not content.strip():
        raise ValidationError("No file content uploaded")

    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    headers = set(reader.fieldnames or [])
    for label, columns in (
        ("date", DATE_COLUMNS),
        ("description", DESCRIPTION_COLUMNS),
        ("amount", AMOUNT_COLUMNS),
    ):
        if not headers.intersection(columns):
            raise ValidationError(f"Missing {label} column (expected one of {', '.join(columns)})")

    rows: list[dict[str, Any]] = []
    # Line 1 is the header.
    for line_no, row in enumerate(reader, start=2):
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        raw_date = _first_value(row, DATE_COLUMNS)
        description = _first_value(row, DESCRIPTION_COLUMNS)
        raw_amount = _first_value(row, AMOUNT_COLUMNS)
        if raw_date is None or description is None or raw_amount is None:
            raise ValidationError(f"Row {line_no}: date, description and amount are required")
        try:
            date = parse_statement_date(raw_date)
            amount = parse_amount(raw_amount)
        except ValueError as exc:
            raise ValidationError(f"Row {line_no}: {exc}") from exc
        rows.append({"date": date, "description": description, "amount": amount})
    return rows
