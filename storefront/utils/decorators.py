"""Role and capability access decorators."""

from functools import wraps

from flask_login import current_user

from storefront.errors import AuthenticationError, AuthorizationError


def capability_required(capability):
    """Decorator to require a capability granted by the caller's role."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthenticationError()
            if not current_user.can(capability):
                raise AuthorizationError(
                    f'Missing capability: {capability}',
                    details={'capability': capability},
                )
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def roles_required(*roles):
    """Decorator to require one of the given roles."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthenticationError()
            if not current_user.has_role(*roles):
                raise AuthorizationError(
                    'Access denied.',
                    required_role=' | '.join(roles),
                )
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = roles_required('admin')
