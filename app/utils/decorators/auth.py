"""
Auth gate
Verifies the bearer token, loads the user and checks the endpoint's
declared capabilities before the view runs.
"""

from functools import wraps

from flask import current_app, g
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from extensions import db
from app.errors import AuthenticationError
from app.models.user import User
from app.policy import Identity, authorize


def _anonymous(reason):
    current_app.logger.debug(f'Serving request anonymously: {reason}')
    g.identity = None
    return None


def resolve_identity(optional=False, ignore_invalid=False):
    """
    Verify the request's token and store the caller's Identity on g

    With ignore_invalid, an expired or malformed token, or one belonging to
    a blocked or deleted account, yields no identity instead of an error.
    """
    try:
        verify_jwt_in_request(optional=optional)
    except (JWTExtendedException, PyJWTError) as e:
        if not ignore_invalid:
            raise
        return _anonymous(f'unusable token ({type(e).__name__})')

    subject = get_jwt_identity()

    if subject is None:
        g.identity = None
        return None

    try:
        user = db.session.get(User, int(subject))
    except (TypeError, ValueError):
        user = None

    if not user or not user.is_active:
        if ignore_invalid:
            return _anonymous('user not found or inactive')
        raise AuthenticationError('User not found or inactive', status_code=403)

    g.identity = Identity.from_user(user)
    return g.identity


def current_identity():
    return g.get('identity')


def requires(*capabilities, optional=False, ignore_invalid=False):
    """
    Protect a view with the auth gate

    Args:
        capabilities: Capability values the caller must hold
        optional: Let unauthenticated requests through with no identity;
                  a token that is present must still be valid
        ignore_invalid: With optional, treat an unusable token like a
                        missing one (read-only public views)
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            identity = resolve_identity(optional=optional, ignore_invalid=optional and ignore_invalid)
            if identity is not None or not optional:
                authorize(identity, *capabilities)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
