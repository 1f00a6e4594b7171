"""
Error taxonomy shared by the services and the HTTP layer.

Every failure carries a user-facing message and the HTTP status it maps to.
"""


class AuthError(Exception):
    """Base error for every expected failure."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "error": {"message": self.message}}


class BadRequestError(AuthError):
    status_code = 400
    default_message = "Bad request"


class ValidationError(BadRequestError):
    """Missing or malformed input."""
    default_message = "Invalid request"


class ExpiredError(BadRequestError):
    """A one-time code was used after its expiry."""
    default_message = "OTP code has expired"


class UnauthorizedError(AuthError):
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(AuthError):
    status_code = 403
    default_message = "Access denied - insufficient permissions"


class NotFoundError(AuthError):
    status_code = 404
    default_message = "Not found"


class InvalidOTPError(NotFoundError):
    """No pending code matches. Reported to clients as a bad request."""
    status_code = 400
    default_message = "Invalid OTP code"


class ConflictError(AuthError):
    status_code = 409
    default_message = "Resource already exists"


class TokenError(UnauthorizedError):
    """Base for token codec failures."""
    default_message = "Invalid or expired token"


class InvalidTokenError(TokenError):
    default_message = "Invalid token"


class ExpiredTokenError(TokenError):
    default_message = "Token has expired"
