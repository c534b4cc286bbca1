"""
CSV bulk import.

Header row names the columns (case-insensitive, surrounding spaces ignored):
company_name, contact_name, primary_email, cc_emails, plan_name, renew_link,
expires_on, paused. cc_emails holds several addresses separated by ';'.
Rows that fail validation are reported per line and skipped; the rest are
imported. Quoted cells may contain commas and line breaks.
"""
import csv
import io

from pydantic import ValidationError as PydanticValidationError

from renewals.schemas.customer import CustomerIn

COLUMNS = ("company_name", "contact_name", "primary_email", "cc_emails",
           "plan_name", "renew_link", "expires_on", "paused")
TRUTHY = {"1", "true", "yes", "y"}


def _format_error(e: PydanticValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts)


def _records(text: str):
    """Yields (first line number, cells) per non-blank record; quoted cells may span lines."""
    reader = csv.reader(io.StringIO(text or "", newline=""))
    last_line = 0
    for cells in reader:
        start, last_line = last_line + 1, reader.line_num
        if any(cell.strip() for cell in cells):
            yield start, cells


def parse_customers_csv(text: str) -> tuple[list[CustomerIn], list[str]]:
    """Returns (valid rows, errors). Error line numbers are 1-based and point at the first line of the record."""
    records = _records(text)
    first = next(records, None)
    if first is None:
        return [], ["empty file"]

    header_no, header_cells = first
    headers = [h.strip().lower() for h in header_cells]
    if "primary_email" not in headers or "expires_on" not in headers:
        return [], [f"line {header_no}: header must include primary_email and expires_on"]

    rows: list[CustomerIn] = []
    errors: list[str] = []
    for line_no, values in records:
        record = {}
        for i, h in enumerate(headers):
            if h not in COLUMNS:
                continue
            record[h] = values[i].strip() if i < len(values) else ""
        if "paused" in record:
            record["paused"] = record["paused"].lower() in TRUTHY
        try:
            rows.append(CustomerIn.model_validate(record))
        except PydanticValidationError as e:
            errors.append(f"line {line_no}: {_format_error(e)}")
    return rows, errors
