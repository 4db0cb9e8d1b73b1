"""Errors raised while turning raw text into tenant records."""

from typing import Optional

from tenant_billing.models.tenant import ValidationIssue


class IngestionError(Exception):
    """Base exception for ingestion failures."""
    pass


class ValidationError(IngestionError):
    """
    Input was readable but not acceptable.

    Carries the individual issues so the UI can show them next to the form.
    """

    def __init__(
        self,
        issues: list[ValidationIssue],
        message: Optional[str] = None,
    ):
        self.issues = issues
        super().__init__(
            message or "; ".join(issue.describe() for issue in issues)
        )


class CSVFormatError(IngestionError):
    """A CSV line could not be split into the expected columns."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        super().__init__(message)
