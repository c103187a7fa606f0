class ApiError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    """Raised when a required field is missing or malformed."""

    status_code = 400


class AuthError(ApiError):
    """Raised for bad credentials or an unacceptable wallet signature."""

    status_code = 401


class NotFoundError(ApiError):
    """Raised when a lookup finds no matching document."""

    status_code = 404


class ConflictError(ApiError):
    """Raised when a username or wallet address is already taken."""

    status_code = 409


class InternalError(ApiError):
    """Raised for store failures; the client only ever sees a generic message."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
