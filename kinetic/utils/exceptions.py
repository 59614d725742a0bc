"""
Custom exceptions for Kinetic retention logic.

Each exception carries a machine-readable code so API handlers can map it to
an HTTP status without string matching.
"""
from .errors import ErrorCode


class KineticError(Exception):
    """Base exception for all retention engine errors."""

    status_code = 400

    def __init__(self, message: str, code=ErrorCode.INVALID_REQUEST):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(KineticError):
    """Resource not found."""

    status_code = 404

    def __init__(self, resource: str, identifier=None, code=ErrorCode.NOT_FOUND):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, code)


class MemberNotFoundError(NotFoundError):
    """Member identity could not be resolved."""

    def __init__(self, identifier=None):
        super().__init__("Member", identifier, ErrorCode.MEMBER_NOT_FOUND)


class CampaignNotFoundError(NotFoundError):
    """Win-back campaign record not found."""

    def __init__(self, identifier=None):
        super().__init__("Campaign", identifier, ErrorCode.CAMPAIGN_NOT_FOUND)


class ValidationError(KineticError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else ErrorCode.VALIDATION_ERROR
        super().__init__(message, code)


class AuthorizationError(KineticError):
    """Caller lacks the privilege for this operation."""

    status_code = 403

    def __init__(self, message: str = "Not authorized for this operation"):
        super().__init__(message, "AUTHORIZATION_ERROR")
