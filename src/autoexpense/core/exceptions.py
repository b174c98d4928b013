"""Custom exception classes for the ingestion and storage core.

Each exception maps to an error code defined in errors.py. Transient
network/auth failures on the read paths are handled where they happen and
never reach callers as these exceptions.
"""

from typing import Any


class AutoExpenseError(Exception):
    """Base exception for all domain errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "SHEET_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    default_code = "UNKNOWN"
    default_status = 500

    def __init__(
        self,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.http_status = http_status or self.default_status
        super().__init__(self.error_code)


class SheetFormatError(AutoExpenseError):
    """Raised when an existing spreadsheet fails layout validation.

    Surfaced synchronously to the caller before any configuration is saved.
    """

    default_code = "SHEET_001"
    default_status = 422


class SheetCreationError(AutoExpenseError):
    """Raised when a new spreadsheet cannot be created or initialized."""

    default_code = "SHEET_002"
    default_status = 502


class SheetAccessError(AutoExpenseError):
    """Raised when a spreadsheet cannot be read during setup."""

    default_code = "SHEET_003"
    default_status = 502


class RemoteStoreError(AutoExpenseError):
    """Raised when a write to the remote spreadsheet store fails.

    Failed writes are not queued; the caller decides whether to retry.
    """

    default_code = "STORE_001"
    default_status = 503


class SpreadsheetNotConfiguredError(AutoExpenseError):
    """Raised when a remote storage mode has no spreadsheet id."""

    default_code = "STORE_002"
    default_status = 400


class SessionExpiredError(AutoExpenseError):
    """Raised by API clients on an expired bearer token (HTTP 401)."""

    default_code = "MAIL_001"
    default_status = 401


class TransactionNotFoundError(AutoExpenseError):
    default_code = "API_001"
    default_status = 404


class ReviewStateError(AutoExpenseError):
    """Raised when approving/rejecting a transaction that is not pending."""

    default_code = "REVIEW_001"
    default_status = 409
