import uuid

import pytest


@pytest.fixture
def admin(auth_headers):
    return auth_headers('admin-1', role='admin')


def test_list_products_with_query(client, make_product, make_category):
    audio = make_category('Audio')
    make_product('Buds', regular_price='120.00', categories=[audio], image_url='/buds.jpg')
    make_product('Speaker', regular_price='80.00', categories=[audio])
    make_product('Phone', regular_price='500.00')

    response = client.get('/api/products?category=audio&sort=price&order=asc&limit=1')
    assert response.status_code == 200
    data = response.get_json()
    assert data['total_items'] == 2
    assert data['total_pages'] == 2
    assert data['current_page'] == 1
    assert [p['name'] for p in data['products']] == ['Speaker']

    data = client.get('/api/products?min_price=100&max_price=200').get_json()
    assert [p['name'] for p in data['products']] == ['Buds']
    assert data['products'][0]['images'][0]['image_url'] == '/buds.jpg'


@pytest.mark.parametrize('query', [
    'sort=cost',
    'order=up',
    'limit=0',
    'limit=101',
    'page=0',
    'min_price=cheap',
    'min_price=10&max_price=5',
    'featured=yes',
])
def test_list_products_rejects_bad_query(client, query):
    response = client.get(f'/api/products?{query}')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'VALIDATION_ERROR'


def test_featured_query_flag(client, make_product):
    make_product('Hero', featured=True)
    make_product('Plain')
    data = client.get('/api/products?featured=true').get_json()
    assert [p['name'] for p in data['products']] == ['Hero']
    assert client.get('/api/products?featured=false').get_json()['total_items'] == 1


def test_product_detail_by_id_and_slug(client, make_product):
    product = make_product('Galaxy Phone')
    by_id = client.get(f'/api/products/{product.id}').get_json()
    by_slug = client.get('/api/products/galaxy-phone').get_json()
    assert by_id['id'] == by_slug['id'] == product.id
    assert by_slug['price'] == 20.0

    response = client.get('/api/products/no-such-product')
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Product not found: no-such-product'


def test_related_products_endpoint(client, make_product, make_category):
    phones = make_category('Phones')
    first = make_product('First', categories=[phones])
    for index in range(5):
        make_product(f'Other {index}', categories=[phones])

    related = client.get(f'/api/products/{first.id}/related').get_json()
    assert len(related) == 4
    assert first.id not in [p['id'] for p in related]

    assert len(client.get(f'/api/products/{first.id}/related?limit=2').get_json()) == 2
    response = client.get(f'/api/products/{uuid.uuid4()}/related')
    assert response.status_code == 404


def test_categories_endpoints(client, admin, auth_headers, make_category):
    make_category('Laptops', display_order=2)
    make_category('Phones', display_order=1)
    assert [c['name'] for c in client.get('/api/products/categories').get_json()] == \
        ['Phones', 'Laptops']

    response = client.post('/api/products/categories', json={'name': 'Audio'},
                           headers=auth_headers('u1'))
    assert response.status_code == 403

    response = client.post('/api/products/categories', json={'name': 'Home Audio'},
                           headers=admin)
    assert response.status_code == 201
    assert response.get_json()['slug'] == 'home-audio'


def test_admin_product_lifecycle(client, admin, make_category):
    phones = make_category('Phones')
    payload = {
        'name': 'Galaxy S24',
        'brand': 'Samsung',
        'model': 'SM-S921',
        'sku': 'SAM-S24',
        'regular_price': 999.99,
        'sale_price': 899.99,
        'cost': 700,
        'stock_quantity': 10,
        'categories': [phones.id],
        'images': [{'url': 'https://cdn.example.com/s24.jpg'}],
    }
    response = client.post('/api/products', json=payload, headers=admin)
    assert response.status_code == 201
    product = response.get_json()
    assert product['slug'] == 'galaxy-s24'
    assert product['price'] == 899.99
    assert product['is_active'] is True
    assert product['categories'][0]['id'] == phones.id
    assert product['images'][0]['is_primary'] is True

    response = client.put(f"/api/products/{product['id']}",
                          json={'sale_price': None, 'stock_quantity': 4}, headers=admin)
    assert response.status_code == 200
    updated = response.get_json()
    assert updated['sale_price'] is None
    assert updated['price'] == 999.99
    assert updated['stock_quantity'] == 4
    assert updated['name'] == 'Galaxy S24'

    response = client.post(f"/api/products/{product['id']}/images",
                           json={'image_urls': ['https://cdn.example.com/back.jpg']},
                           headers=admin)
    assert response.status_code == 201
    assert response.get_json()[0]['display_order'] == 1

    response = client.delete(f"/api/products/{product['id']}", headers=admin)
    assert response.status_code == 204
    assert client.get(f"/api/products/{product['id']}").status_code == 404
    assert client.delete(f"/api/products/{product['id']}", headers=admin).status_code == 404


def test_create_product_validation(client, admin):
    response = client.post('/api/products', json={'name': 'Nameless'}, headers=admin)
    assert response.status_code == 400
    fields = response.get_json()['details']['fields']
    assert {'brand', 'model', 'sku', 'regular_price', 'cost'} <= set(fields)

    response = client.post('/api/products', json={
        'name': 'X', 'brand': 'B', 'model': 'M', 'sku': 'X1', 'regular_price': -1, 'cost': 1,
    }, headers=admin)
    assert response.status_code == 400

    response = client.post('/api/products', json={
        'name': 'X', 'brand': 'B', 'model': 'M', 'sku': 'X1', 'regular_price': 1, 'cost': 1,
        'categories': 'phones',
    }, headers=admin)
    assert response.status_code == 400


@pytest.mark.parametrize('body, field', [
    ({'name': None}, 'name'),
    ({'regular_price': None}, 'regular_price'),
    ({'is_active': 'no'}, 'is_active'),
    ({'featured': 1}, 'featured'),
    ({'stock_quantity': 1.5}, 'stock_quantity'),
])
def test_update_rejects_bad_values(client, admin, make_product, body, field):
    product = make_product('Keeper')
    response = client.put(f'/api/products/{product.id}', json=body, headers=admin)
    assert response.status_code == 400
    assert response.get_json()['details']['field'] == field

    current = client.get(f'/api/products/{product.id}').get_json()
    assert (current['name'], current['is_active']) == ('Keeper', True)


def test_update_with_empty_categories_clears_them(client, admin, make_product, make_category):
    product = make_product(categories=[make_category('Phones')])
    response = client.put(f'/api/products/{product.id}', json={'categories': []}, headers=admin)
    assert response.status_code == 200
    assert response.get_json()['categories'] == []


def test_image_urls_are_required(client, admin, make_product):
    product = make_product()
    response = client.post(f'/api/products/{product.id}/images', json={}, headers=admin)
    assert response.status_code == 400
    response = client.post(f'/api/products/{product.id}/images', json={'image_urls': []},
                           headers=admin)
    assert response.status_code == 400


def test_update_missing_product(client, admin):
    response = client.put(f'/api/products/{uuid.uuid4()}', json={'name': 'Ghost'},
                          headers=admin)
    assert response.status_code == 404


@pytest.mark.parametrize('method, path', [
    ('post', '/api/products'),
    ('put', '/api/products/some-id'),
    ('delete', '/api/products/some-id'),
    ('post', '/api/products/some-id/images'),
])
def test_catalog_writes_need_catalog_write(client, auth_headers, method, path):
    response = getattr(client, method)(path, json={})
    assert response.status_code == 401

    for role in ('customer', 'technician', 'sales'):
        response = getattr(client, method)(path, json={}, headers=auth_headers('u1', role))
        assert response.status_code == 403
        assert response.get_json()['details']['capability'] == 'catalog:write'
