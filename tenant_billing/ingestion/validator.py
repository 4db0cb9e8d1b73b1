"""
Tenant Validation

DESIGN DECISION: The single-entry form and the CSV import share one set
of rules:
- the name must not be blank
- water, electricity and rent must each parse as a finite number
  (an empty field is not zero, it is missing)

The form raises on the first bad submission so the user can correct it
in place. The import never raises for bad data; it collects one issue
per line and field so the whole file can be fixed in one go.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from typing import Optional

from tenant_billing.ingestion.errors import ValidationError
from tenant_billing.ingestion.parser import (
    CSV_COLUMNS,
    CSV_HEADER,
    HeaderMode,
    iter_data_lines,
    parse_amount,
)
from tenant_billing.models.tenant import (
    ChargeField,
    ImportResult,
    NewTenant,
    ValidationIssue,
)


FORM_ERROR_MESSAGE = "Please fill in all fields; amounts must be numbers"


def _check_name(
    name: Optional[str],
    line_number: Optional[int] = None,
) -> list[ValidationIssue]:
    if name is None or not str(name).strip():
        return [ValidationIssue(
            line_number=line_number,
            field="name",
            issue_type="missing",
            message="Name is required",
            suggested_fix="Enter the tenant's name",
        )]
    return []


def _check_amount(
    field: ChargeField,
    raw: Optional[str],
    line_number: Optional[int] = None,
) -> tuple[Optional[float], list[ValidationIssue]]:
    text = "" if raw is None else str(raw)
    if not text.strip():
        return None, [ValidationIssue(
            line_number=line_number,
            field=field.value,
            issue_type="missing",
            message=f"{field.value.capitalize()} amount is required",
            suggested_fix="Enter 0 if there is no charge",
        )]

    value = parse_amount(text)
    if value is None:
        return None, [ValidationIssue(
            line_number=line_number,
            field=field.value,
            issue_type="not_a_number",
            message=f"{field.value.capitalize()} amount {text.strip()!r} is not a number",
            suggested_fix="Use digits with an optional decimal point, e.g. 80.50",
        )]
    return value, []


def validate_single(
    name: Optional[str],
    water: Optional[str],
    electricity: Optional[str],
    rent: Optional[str],
) -> NewTenant:
    """
    Validate raw form input.

    The name is passed through unmodified; the amounts are converted
    to floats.

    Raises:
        ValidationError: if the name is blank or any amount is missing
            or not a finite number
    """
    issues = _check_name(name)
    amounts = {}
    for field, raw in zip(ChargeField, (water, electricity, rent)):
        amounts[field.value], field_issues = _check_amount(field, raw)
        issues.extend(field_issues)

    if issues:
        raise ValidationError(
            issues,
            message=f"{FORM_ERROR_MESSAGE}: " + "; ".join(i.message for i in issues),
        )

    return NewTenant(name=name, **amounts)


def validate_csv(
    content: str,
    header_mode: HeaderMode = HeaderMode.ALWAYS,
    max_rows: Optional[int] = None,
) -> ImportResult:
    """
    Validate a whole CSV document.

    Every data line is checked with the same rules as the form, plus a
    column count check. Names are trimmed.

    Returns:
        ImportResult with the rows that passed and every issue found.
        Callers must not import anything when `has_errors` is True.
    """
    header_skipped, rows = iter_data_lines(content, header_mode)

    records = []
    issues = []

    for line_number, fields in rows:
        if len(fields) != len(CSV_COLUMNS):
            issues.append(ValidationIssue(
                line_number=line_number,
                field="line",
                issue_type="column_count",
                message=(
                    f"Expected {len(CSV_COLUMNS)} values ({CSV_HEADER}), "
                    f"found {len(fields)}"
                ),
                suggested_fix="Names cannot contain commas",
            ))
            continue

        raw_name, *raw_amounts = fields
        line_issues = _check_name(raw_name, line_number)
        amounts = {}
        for field, raw in zip(ChargeField, raw_amounts):
            amounts[field.value], field_issues = _check_amount(field, raw, line_number)
            line_issues.extend(field_issues)

        if line_issues:
            issues.extend(line_issues)
        else:
            records.append(NewTenant(name=raw_name.strip(), **amounts))

    if not rows:
        issues.append(ValidationIssue(
            field="content",
            issue_type="empty",
            message="No tenant rows found",
            suggested_fix=(
                "The first line is a header; put one tenant per line below it"
                if header_skipped else None
            ),
        ))
    elif max_rows is not None and len(rows) > max_rows:
        issues.append(ValidationIssue(
            field="content",
            issue_type="too_many_rows",
            message=f"File has {len(rows)} rows; at most {max_rows} can be imported at once",
            suggested_fix="Split the file into smaller parts",
        ))

    return ImportResult(
        records=records,
        issues=issues,
        header_skipped=header_skipped,
        total_lines=len(rows),
    )


def get_user_friendly_summary(result: ImportResult) -> str:
    """
    Generate a user-friendly summary of an import.

    This is what we show next to the upload box.
    """
    if result.imported_count:
        return f"✅ Imported {result.imported_count} records"

    if not result.has_errors:
        return f"✅ {len(result.records)} records ready to import"

    lines = [f"❌ Nothing was imported ({result.error_count} problems found):"]
    for issue in result.issues:
        if issue.severity == "error":
            lines.append(f"   • {issue.describe()}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")

    lines.append("")
    lines.append("Please fix the lines above and upload again.")
    return "\n".join(lines)
