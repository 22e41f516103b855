"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(ApplicationError):
    """Raised when local validation fails. Never reaches the notes API."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class FetchError(ApplicationError):
    """Raised on network failure or a non-success response from the notes API."""

    def __init__(self, message: str = "Failed to reach notes service", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, code="SYS_FETCH_ERROR")


class NotFoundError(ApplicationError):
    """Raised when a note (or share id) is no longer known to the server."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class AuthError(ApplicationError):
    """Raised when the credential is missing, expired, or rejected."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class InvalidTransitionError(ApplicationError):
    """Raised when a view event is not permitted in the current view state."""

    def __init__(self, message: str = "Invalid view transition") -> None:
        super().__init__(message, code="STATE_INVALID_TRANSITION")
