"""
CSV Parsing for Tenant Imports

The import format is deliberately plain:

    <header line>
    name,water,electricity,rent
    ...

Fields are split on a literal comma. There is no quoting, so names
cannot contain commas.

DESIGN DECISION: `parse_csv` is the raw transform. It does not reject
non-numeric amounts (they become NaN) and it does not check them at all.
The application never sends its output to the store directly; imports go
through `validator.validate_csv`, which applies the same rules as the
single-entry form.
"""

import math
import re
from enum import Enum
from typing import Iterable, Optional

from tenant_billing.ingestion.errors import CSVFormatError, IngestionError
from tenant_billing.models.tenant import NewTenant


CSV_COLUMNS = ["name", "water", "electricity", "rent"]
CSV_HEADER = ",".join(CSV_COLUMNS)

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INFINITIES = {
    "Infinity": math.inf,
    "+Infinity": math.inf,
    "-Infinity": -math.inf,
}


class HeaderMode(str, Enum):
    """How the first line of an import is treated."""
    ALWAYS = "always"  # first line is dropped unconditionally
    DETECT = "detect"  # first line is dropped only if it looks like a header


def parse_amount(text: Optional[str]) -> Optional[float]:
    """
    Strictly parse an amount.

    Returns None for blank, non-numeric or non-finite text.
    """
    if text is None:
        return None
    stripped = str(text).strip()
    if not _NUMBER_RE.match(stripped):
        return None
    value = float(stripped)
    if not math.isfinite(value):
        return None
    return value


def coerce_number(text: str) -> float:
    """
    Lenient numeric coercion used by the raw CSV transform.

    Blank text becomes 0.0, numeric text becomes its float value and
    anything else becomes NaN.
    """
    stripped = text.strip()
    if not stripped:
        return 0.0
    if stripped in _INFINITIES:
        return _INFINITIES[stripped]
    if _NUMBER_RE.match(stripped):
        return float(stripped)
    return math.nan


def looks_like_header(line: str) -> bool:
    """
    Guess whether a line is a header rather than a tenant row.

    A data row has at least four fields and every non-blank amount
    field is a number.
    """
    fields = line.split(",")
    if len(fields) < len(CSV_COLUMNS):
        return True
    for raw in fields[1:len(CSV_COLUMNS)]:
        if raw.strip() and parse_amount(raw) is None:
            return True
    return False


def iter_data_lines(
    content: str,
    header_mode: HeaderMode = HeaderMode.ALWAYS,
) -> tuple[bool, list[tuple[int, list[str]]]]:
    """
    Split content into numbered, non-blank data lines.

    Returns (header_skipped, [(line_number, fields), ...]) where
    line numbers are 1-based positions in the original text.
    """
    lines = content.split("\n")

    header_skipped = False
    if lines and (
        HeaderMode(header_mode) is HeaderMode.ALWAYS
        or looks_like_header(lines[0])
    ):
        header_skipped = True

    start = 1 if header_skipped else 0
    rows = []
    for line_number, line in enumerate(lines[start:], start=start + 1):
        if not line.strip():
            continue
        rows.append((line_number, line.split(",")))

    return header_skipped, rows


def parse_csv(
    content: str,
    header_mode: HeaderMode = HeaderMode.ALWAYS,
) -> list[NewTenant]:
    """
    Parse CSV text into tenant rows, in file order.

    Raises:
        CSVFormatError: if a data line has fewer than four fields
    """
    _, rows = iter_data_lines(content, header_mode)

    tenants = []
    for line_number, fields in rows:
        if len(fields) < len(CSV_COLUMNS):
            raise CSVFormatError(
                f"Line {line_number}: expected {len(CSV_COLUMNS)} comma-separated "
                f"values ({CSV_HEADER}), got {len(fields)}",
                line_number=line_number,
            )
        name, water, electricity, rent = fields[:len(CSV_COLUMNS)]
        tenants.append(NewTenant(
            name=name.strip(),
            water=coerce_number(water),
            electricity=coerce_number(electricity),
            rent=coerce_number(rent),
        ))

    return tenants


def _format_number(value: float) -> str:
    value = float(value)
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # repr() is the shortest text that round-trips through float()
    return repr(value)


def to_csv(records: Iterable[NewTenant], header: bool = True) -> str:
    """
    Encode records in the import format.

    Raises:
        CSVFormatError: if a name contains a comma or a line break
    """
    lines = [CSV_HEADER] if header else []
    for record in records:
        if any(ch in record.name for ch in ",\r\n"):
            raise CSVFormatError(
                f"Name {record.name!r} cannot be written to CSV "
                "(commas and line breaks are not supported)"
            )
        lines.append(",".join([
            record.name,
            _format_number(record.water),
            _format_number(record.electricity),
            _format_number(record.rent),
        ]))
    return "\n".join(lines) + "\n"


def decode_upload(
    data: bytes,
    encoding: str = "utf-8-sig",
    max_bytes: Optional[int] = None,
) -> str:
    """
    Turn uploaded file bytes into text.

    Raises:
        IngestionError: if the file is too large or not valid text
    """
    if max_bytes is not None and len(data) > max_bytes:
        raise IngestionError(
            f"File is too large ({len(data)} bytes, limit {max_bytes})"
        )
    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise IngestionError("File could not be read") from e
