"""
Domain errors raised by services and dependencies.

Each carries the HTTP status it maps to; ``app.main`` renders them with
``error_response`` so routes can simply let them propagate.
"""


class AppError(Exception):
    """Base class for errors with an HTTP status"""

    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(AppError):
    status_code = 401
    default_message = "unauthorized access"


class PermissionDeniedError(AppError):
    status_code = 403
    default_message = "forbidden access"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class InvalidIdError(AppError):
    status_code = 400
    default_message = "Invalid id"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class PaymentGatewayError(AppError):
    status_code = 502
    default_message = "Payment gateway error"
