"""Custom exceptions for Flex Pinot.

This module defines exception classes for the error conditions that can
occur while loading the CSV, talking to the Flex API and importing rows.
"""


class FlexPinotError(Exception):
    """Base exception for all Flex Pinot errors."""

    pass


class InputError(FlexPinotError):
    """Raised for bad command-line input or a missing/unreadable CSV file."""

    pass


class SchemaError(FlexPinotError):
    """Raised when the CSV header row lacks required columns."""

    pass


class SetupError(FlexPinotError):
    """Raised when the run cannot start, e.g. account discovery failed."""

    pass


class RowError(FlexPinotError):
    """Raised when a single CSV row cannot be imported.

    Row errors never abort the run: the row is reported and skipped.

    Attributes:
        warning: True when the row is skipped deliberately (e.g. the resource
            already exists) rather than because something is wrong with it
    """

    def __init__(self, message: str, warning: bool = False):
        """Initialize row error.

        Args:
            message: Error message shown to the user
            warning: Report as a warning instead of an error
        """
        super().__init__(message)
        self.message = message
        self.warning = warning


class APIError(FlexPinotError):
    """Base class for API-related errors."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response: API response body
        """
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with status code and response."""
        msg = self.message
        if self.status_code:
            msg = f"[{self.status_code}] {msg}"
        if self.response:
            msg = f"{msg}: {self.response}"
        return msg


class AuthenticationError(APIError):
    """Raised when authentication fails (401 Unauthorized)."""

    pass


class AuthorizationError(APIError):
    """Raised when authorization fails (403 Forbidden)."""

    pass


class NotFoundError(APIError):
    """Raised when a resource is not found (404 Not Found)."""

    pass


class ConflictError(APIError):
    """Raised when a resource conflict occurs (409 Conflict)."""

    pass


class ServerError(APIError):
    """Raised when server returns 5xx error."""

    pass


class TransportError(FlexPinotError):
    """Raised when network-related errors occur (timeouts, connection failures)."""

    pass
