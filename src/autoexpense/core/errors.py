"""Error codes and user-friendly messages.

This module defines the error catalog for the ingestion and storage core.
Each error has:
- error_code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

ERROR_CATALOG: dict[str, dict] = {
    "SHEET_001": {
        "code": "SHEET_001",
        "message": "Selected spreadsheet does not match the expected layout",
        "user_message": "This sheet is not matching with our requirements.",
        "suggestion": "Please select a sheet created by Auto Expense or create a new one.",
        "retry_allowed": False,
    },
    "SHEET_002": {
        "code": "SHEET_002",
        "message": "Spreadsheet creation failed",
        "user_message": "We couldn't create your expense sheet.",
        "suggestion": "Check your connection and Google account access, then try again.",
        "retry_allowed": True,
    },
    "SHEET_003": {
        "code": "SHEET_003",
        "message": "Spreadsheet could not be read",
        "user_message": "We couldn't open that sheet.",
        "suggestion": "Check your connection and that the sheet is shared with your account.",
        "retry_allowed": True,
    },
    "STORE_001": {
        "code": "STORE_001",
        "message": "Write to the remote spreadsheet store failed",
        "user_message": "Your change couldn't be saved to your sheet.",
        "suggestion": "Check your connection and try again. The change was not saved.",
        "retry_allowed": True,
    },
    "STORE_002": {
        "code": "STORE_002",
        "message": "Remote storage mode selected without a spreadsheet id",
        "user_message": "No expense sheet is connected.",
        "suggestion": "Create a new sheet or select an existing one in storage settings.",
        "retry_allowed": False,
    },
    "MAIL_001": {
        "code": "MAIL_001",
        "message": "Mailbox session expired and could not be refreshed",
        "user_message": "Your mail session has expired.",
        "suggestion": "Sign in again to resume automatic parsing.",
        "retry_allowed": True,
    },
    "API_001": {
        "code": "API_001",
        "message": "Transaction not found",
        "user_message": "We couldn't find this transaction.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "REVIEW_001": {
        "code": "REVIEW_001",
        "message": "Transaction is not awaiting review",
        "user_message": "This transaction has already been reviewed.",
        "suggestion": "Refresh the review queue to see what is left.",
        "retry_allowed": False,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request data failed validation",
        "user_message": "Invalid input data",
        "suggestion": "Please check your input and try again",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Error definition dict (generic entry for unknown codes)
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]

