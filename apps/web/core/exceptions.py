"""Gateway error taxonomy. Each error knows the HTTP status it maps to."""


class GatewayError(Exception):
    """Base exception for errors reported to API callers."""

    status_code = 500

    def __init__(self, message: str, details: list[dict[str, str]] | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(GatewayError):
    """Malformed or missing input."""

    status_code = 400


class AuthenticationError(GatewayError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class PaymentRequiredError(GatewayError):
    """Payment could not be verified."""

    status_code = 402


class AuthorizationError(GatewayError):
    """Valid identity without the required role."""

    status_code = 403


class NotFoundError(GatewayError):
    """Requested resource does not exist."""

    status_code = 404


class ConflictError(GatewayError):
    """Resource already exists."""

    status_code = 409


class UnexpectedError(GatewayError):
    """Store or network failure."""

    status_code = 500
