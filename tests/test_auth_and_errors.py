import pytest
from itsdangerous import URLSafeTimedSerializer

from storefront.errors import (AppError, AuthorizationError, BusinessRuleError, NotFoundError,
                               ValidationError)
from storefront.utils.identity import ROLE_CAPABILITIES, Principal, issue_token


def test_role_capabilities():
    admin = Principal('a', 'admin')
    assert all(admin.can(cap) for caps in ROLE_CAPABILITIES.values() for cap in caps)

    technician = Principal('t', 'technician')
    assert technician.can('catalog:read_stock')
    assert not technician.can('catalog:write')

    sales = Principal('s', 'sales')
    assert sales.can('orders:all') and sales.can('dashboard:sales')
    assert not sales.can('orders:manage')


def test_unknown_role_falls_back_to_customer():
    principal = Principal('x', 'superuser')
    assert principal.role == 'customer'
    assert principal.capabilities == ROLE_CAPABILITIES['customer']


@pytest.mark.parametrize('header', [
    'Bearer not-a-token',
    'Basic dXNlcjpwYXNz',
    'Bearer',
])
def test_bad_credentials_are_anonymous(client, header):
    response = client.get('/api/wishlist', headers={'Authorization': header})
    assert response.status_code == 401
    assert response.get_json()['error'] == 'AUTH_ERROR'


def test_token_signed_with_another_secret_is_rejected(client):
    forged = URLSafeTimedSerializer('wrong-secret', salt='storefront-identity').dumps(
        {'sub': 'u1', 'role': 'admin'})
    response = client.get('/api/dashboard/admin', headers={'Authorization': f'Bearer {forged}'})
    assert response.status_code == 401


def test_expired_token_is_rejected(app, client):
    token = issue_token('u1')
    app.config['IDENTITY_TOKEN_MAX_AGE'] = -1
    response = client.get('/api/wishlist', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 401


@pytest.mark.parametrize('path, allowed', [
    ('/api/dashboard/sales', {'sales', 'admin'}),
    ('/api/dashboard/inventory', {'technician', 'admin'}),
    ('/api/dashboard/admin', {'admin'}),
])
def test_dashboard_gating(client, auth_headers, path, allowed):
    for role in ('customer', 'technician', 'sales', 'admin'):
        response = client.get(path, headers=auth_headers('staff', role))
        expected = 200 if role in allowed else 403
        assert response.status_code == expected, role


def test_admin_dashboard_payload(client, auth_headers, guest_headers):
    client.get('/api/cart', headers=guest_headers)
    data = client.get('/api/dashboard/admin', headers=auth_headers('boss', 'admin')).get_json()
    assert data['carts']['active'] == 1
    assert set(data) == {'sales', 'inventory', 'carts'}

    response = client.get('/api/dashboard/admin', headers=auth_headers('rep', 'sales'))
    assert response.get_json()['details']['required_role'] == 'admin'


def test_error_payloads():
    assert ValidationError('bad', field='name').to_dict() == {
        'error': 'VALIDATION_ERROR', 'message': 'bad', 'details': {'field': 'name'}}
    assert NotFoundError('Product', 'abc').message == 'Product not found: abc'
    assert AuthorizationError(required_role='admin').status_code == 403
    assert BusinessRuleError('no').status_code == 409
    assert AppError('boom').to_dict() == {'error': 'APP_ERROR', 'message': 'boom'}


def test_routing_errors_are_json(client):
    response = client.get('/api/nowhere')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'NOT_FOUND'

    response = client.patch('/api/cart')
    assert response.status_code == 405
    assert response.get_json()['error'] == 'METHOD_NOT_ALLOWED'


def test_non_object_body_is_rejected(client, guest_headers):
    response = client.post('/api/cart/items', json=['not', 'an', 'object'],
                           headers=guest_headers)
    assert response.status_code == 400


def test_unexpected_errors_become_500(app, client):
    @app.route('/api/explode')
    def explode():
        raise RuntimeError('kaboom')

    response = client.get('/api/explode')
    assert response.status_code == 500
    assert response.get_json() == {'error': 'INTERNAL_ERROR',
                                   'message': 'Internal server error'}


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok'}
