"""Ingestion package: raw text in, validated tenant records out."""

from tenant_billing.ingestion.errors import (
    CSVFormatError,
    IngestionError,
    ValidationError,
)
from tenant_billing.ingestion.parser import (
    CSV_COLUMNS,
    CSV_HEADER,
    HeaderMode,
    coerce_number,
    decode_upload,
    looks_like_header,
    parse_amount,
    parse_csv,
    to_csv,
)
from tenant_billing.ingestion.totals import (
    format_amount,
    grand_total,
    round_amount,
    total_charge,
)
from tenant_billing.ingestion.validator import (
    get_user_friendly_summary,
    validate_csv,
    validate_single,
)

__all__ = [
    # Errors
    "CSVFormatError",
    "IngestionError",
    "ValidationError",
    # Parsing
    "CSV_COLUMNS",
    "CSV_HEADER",
    "HeaderMode",
    "coerce_number",
    "decode_upload",
    "looks_like_header",
    "parse_amount",
    "parse_csv",
    "to_csv",
    # Totals
    "format_amount",
    "grand_total",
    "round_amount",
    "total_charge",
    # Validation
    "get_user_friendly_summary",
    "validate_csv",
    "validate_single",
]
