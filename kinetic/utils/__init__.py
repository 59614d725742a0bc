"""
Utility modules for Kinetic.
"""
from .logging_config import setup_logging
from .errors import ErrorCode, error_response, unauthorized, forbidden
from .exceptions import (
    KineticError,
    NotFoundError,
    MemberNotFoundError,
    CampaignNotFoundError,
    ValidationError,
    AuthorizationError,
)
