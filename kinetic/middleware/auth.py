"""
Bearer Token Authentication Middleware.

Verifies HS256 JWTs issued by the account system and resolves the calling
member. Tokens carry:
- sub: Member external ID
- role: Optional role hint (the member record is authoritative)
- exp: Expiration time

In development and testing, an X-Member-Id header (member external ID) is
accepted instead of a token.
"""
import logging
import jwt
from functools import wraps
from flask import request, g, current_app

from ..models import Member
from ..utils.errors import unauthorized, forbidden
from ..utils.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


def decode_bearer_token(token: str) -> dict | None:
    """
    Decode and verify a bearer token.

    Returns:
        Decoded payload or None if invalid
    """
    if not token:
        return None

    secret = current_app.config.get('AUTH_JWT_SECRET')
    if not secret:
        logger.warning('[Auth] AUTH_JWT_SECRET not configured')
        return None

    audience = current_app.config.get('AUTH_JWT_AUDIENCE') or None
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=['HS256'],
            audience=audience,
            options={
                'verify_aud': bool(audience),
                'verify_exp': True,
            }
        )
    except jwt.ExpiredSignatureError:
        logger.info('[Auth] Bearer token expired')
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f'[Auth] Invalid token: {e}')
        return None


def _resolve_member():
    """Return (member, auth_method) for the current request, or (None, None)."""
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        payload = decode_bearer_token(auth_header.split(' ', 1)[1])
        if payload and payload.get('sub'):
            member = Member.query.filter_by(external_id=str(payload['sub'])).first()
            return member, 'bearer_token'
        return None, None

    if current_app.config.get('AUTH_DEV_HEADERS'):
        external_id = request.headers.get('X-Member-Id')
        if external_id:
            member = Member.query.filter_by(external_id=external_id).first()
            return member, 'dev_header'

    return None, None


def require_auth(f):
    """
    Decorator to require an authenticated member.

    Sets g.current_member, g.member_id, g.role and g.auth_method.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        member, method = _resolve_member()
        if not member:
            return unauthorized('Missing or invalid credentials')
        if member.status != 'active':
            return forbidden('Member account is not active')

        g.current_member = member
        g.member_id = member.id
        g.role = member.role
        g.auth_method = method
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Decorator to require an authenticated admin or superadmin."""
    @wraps(f)
    @require_auth
    def decorated_function(*args, **kwargs):
        if not g.current_member.is_admin:
            return forbidden('Admin privileges required')
        return f(*args, **kwargs)

    return decorated_function


def ensure_self_or_admin(member_id: int) -> None:
    """
    Guard per-member reads.

    Raises:
        AuthorizationError: If the caller is neither the member nor an admin
    """
    member = g.get('current_member')
    if member is None or (member.id != member_id and not member.is_admin):
        raise AuthorizationError('You can only access your own data')
