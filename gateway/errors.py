"""
Gateway error hierarchy.

Every error the API returns to a caller is raised as a GatewayError subclass
and rendered by a single exception handler into the envelope:

    {"error": {"code": "...", "description": "..."}}
"""

from gateway.models.enums import ErrorCode


class GatewayError(Exception):
    """Base exception for errors surfaced to API callers."""

    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR
    status_code: int = 500
    default_description: str = "Internal server error"

    def __init__(self, description: str | None = None):
        self.description = description or self.default_description
        super().__init__(self.description)

    def to_body(self) -> dict:
        return {"error": {"code": self.code.value, "description": self.description}}


class AuthenticationError(GatewayError):
    """Missing or unknown API credentials."""

    code = ErrorCode.AUTHENTICATION_ERROR
    status_code = 401
    default_description = "Invalid API credentials"


class BadRequestError(GatewayError):
    """Malformed or incomplete request body."""

    code = ErrorCode.BAD_REQUEST_ERROR
    status_code = 400
    default_description = "Bad request"


class NotFoundError(GatewayError):
    """Unknown resource, or one owned by another merchant."""

    code = ErrorCode.NOT_FOUND_ERROR
    status_code = 404
    default_description = "Resource not found"


class InvalidVpaError(GatewayError):
    code = ErrorCode.INVALID_VPA
    status_code = 400
    default_description = "Invalid VPA format"


class InvalidCardError(GatewayError):
    code = ErrorCode.INVALID_CARD
    status_code = 400
    default_description = "Invalid card number"


class ExpiredCardError(GatewayError):
    code = ErrorCode.EXPIRED_CARD
    status_code = 400
    default_description = "Card expiry date is invalid or in the past"
