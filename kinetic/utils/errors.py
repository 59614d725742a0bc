"""
JSON error bodies for the Kinetic API.

Every error leaves the API as {"error": {"message": ..., "code": ...}}. The
KineticError handler in the app factory and the auth decorators are the only
callers.
"""
import logging
from enum import Enum
from typing import Union

from flask import jsonify

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable codes carried in error bodies."""
    AUTH_REQUIRED = "AUTH_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    CAMPAIGN_NOT_FOUND = "CAMPAIGN_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(
    message: str,
    code: Union[ErrorCode, str] = ErrorCode.INTERNAL_ERROR,
    status_code: int = 500,
    log_error: bool = True
) -> tuple:
    """
    Build a (response, status) pair for Flask.

    Server errors log at ERROR, client errors at WARNING unless log_error
    is False.
    """
    code_value = code.value if isinstance(code, ErrorCode) else code

    if log_error and status_code >= 500:
        logger.error(f"API Error [{code_value}]: {message}")
    elif log_error and status_code >= 400:
        logger.warning(f"API Error [{code_value}]: {message}")

    return jsonify({'error': {'message': message, 'code': code_value}}), status_code


def unauthorized(message: str = "Authentication required") -> tuple:
    return error_response(message, ErrorCode.AUTH_REQUIRED, 401, log_error=False)


def forbidden(message: str = "Permission denied") -> tuple:
    return error_response(message, ErrorCode.PERMISSION_DENIED, 403, log_error=False)
