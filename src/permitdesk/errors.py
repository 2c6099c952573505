from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Permit not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when the admin session is missing, invalid or expired.

    ``clear_cookie`` tells the web layer to delete the session cookie
    on the error response.
    """

    def __init__(self, message: str = "Not authenticated", *, clear_cookie: bool = False) -> None:
        super().__init__(message)
        self.clear_cookie = clear_cookie


class ValidationError(UserError):
    """Raised when user input fails validation."""


class ServiceError(Exception):
    """Base class for internal failures of a submission or retrieval step.

    The message is short and safe to return to the client; the underlying
    cause is chained and logged server-side only.
    """


class UpstreamError(ServiceError):
    """Raised when the object store or the database fails."""


class RenderError(ServiceError):
    """Raised when PDF certificate generation fails."""

    def __init__(self, message: str = "Failed to generate PDF") -> None:
        super().__init__(message)
