"""
Middleware package for Kinetic.
"""
from .auth import require_auth, require_admin, ensure_self_or_admin, decode_bearer_token
