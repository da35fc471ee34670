"""Authenticated principal and caller identity resolution.

Identity is owned by an external provider. The API only sees a signed
bearer token carrying the user id and role; it never stores credentials.
"""

from flask import current_app, request
from flask_login import UserMixin, current_user
from itsdangerous import BadSignature, URLSafeTimedSerializer

from storefront.errors import ValidationError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

TOKEN_SALT = 'storefront-identity'

ROLES = ('customer', 'technician', 'sales', 'admin')

_CUSTOMER = frozenset({'cart', 'wishlist', 'orders:own'})

ROLE_CAPABILITIES = {
    'customer': _CUSTOMER,
    'technician': _CUSTOMER | {'catalog:read_stock'},
    'sales': _CUSTOMER | {'orders:all', 'dashboard:sales'},
    'admin': _CUSTOMER | {
        'catalog:read_stock', 'catalog:write', 'orders:all', 'orders:manage',
        'dashboard:sales', 'dashboard:admin',
    },
}


class Principal(UserMixin):
    """Caller vouched for by the identity provider."""

    def __init__(self, user_id, role='customer'):
        self.id = str(user_id)
        self.role = role if role in ROLE_CAPABILITIES else 'customer'

    @property
    def capabilities(self):
        return ROLE_CAPABILITIES[self.role]

    def can(self, capability):
        return capability in self.capabilities

    def has_role(self, *roles):
        return self.role in roles

    def __repr__(self):
        return f'<Principal {self.id} ({self.role})>'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['IDENTITY_TOKEN_SECRET'], salt=TOKEN_SALT)


def issue_token(user_id, role='customer'):
    """Sign a principal token the way the identity bridge does."""
    return _serializer().dumps({'sub': str(user_id), 'role': role})


def load_principal(req):
    """Flask-Login request loader: bearer token -> Principal or None."""
    header = req.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token:
        return None
    try:
        claims = _serializer().loads(token, max_age=current_app.config['IDENTITY_TOKEN_MAX_AGE'])
    except BadSignature as e:
        logger.info("Rejected identity token: %s", e.__class__.__name__)
        return None
    if not claims.get('sub'):
        return None
    return Principal(claims['sub'], claims.get('role', 'customer'))


def request_session_id():
    """Anonymous cart session id from the cookie or the header."""
    return (request.cookies.get(current_app.config['CART_SESSION_COOKIE'])
            or request.headers.get(current_app.config['CART_SESSION_HEADER']))


def current_identity():
    """Return (user_id, session_id) for the cart, user id first."""
    if current_user.is_authenticated:
        return current_user.id, None
    session_id = request_session_id()
    if not session_id:
        raise ValidationError('User ID or Session ID is required')
    return None, session_id
