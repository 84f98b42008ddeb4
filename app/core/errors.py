"""Domain error taxonomy raised by services and rendered by the API layer."""


class ServiceError(Exception):
    """Base for errors a service raises on purpose; carries an HTTP status and a safe message."""

    status_code: int = 500

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class ValidationError(ServiceError):
    """Input failed schema or semantic validation (e.g. weak password, unknown role ids)."""

    status_code = 400


class AuthenticationError(ServiceError):
    """Missing, bad or expired credentials or token. Message stays generic."""

    status_code = 401


class AuthorizationError(ServiceError):
    """Authenticated, but lacking the required role."""

    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """Unique constraint violation (duplicate email, duplicate role name)."""

    status_code = 400


class RateLimitError(ServiceError):
    """Too many attempts for a key; retry_after is the number of seconds until a slot frees."""

    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class InternalError(ServiceError):
    status_code = 500
