from decimal import Decimal

import pytest
from flask import g

from storefront import create_app
from storefront.extensions import db as _db
from storefront.models import Category, Product, ProductCategory, ProductImage
from storefront.utils.helpers import to_money
from storefront.utils.identity import issue_token


@pytest.fixture
def app():
    app = create_app('testing')

    @app.before_request
    def forget_principal():
        # Requests reuse the test's app context, and with it g
        g.pop('_login_user', None)

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def auth_headers(app):
    """Build request headers for a principal: auth_headers('u1', role='admin')."""
    def _headers(user_id, role='customer'):
        return {'Authorization': f'Bearer {issue_token(user_id, role)}'}
    return _headers


@pytest.fixture
def guest_headers():
    return {'X-Session-Id': 'guest-session-1'}


@pytest.fixture
def make_category(app):
    def _make(name='Phones', **kwargs):
        category = Category(name=name, **kwargs)
        category.generate_slug()
        _db.session.add(category)
        _db.session.commit()
        return category
    return _make


_sku_counter = iter(range(1, 100000))


@pytest.fixture
def make_product(app):
    def _make(name='Test Phone', regular_price='20.00', stock_quantity=5, categories=(),
              image_url=None, **kwargs):
        sku = kwargs.pop('sku', None) or f'SKU-{next(_sku_counter):05d}'
        sale_price = kwargs.pop('sale_price', None)
        product = Product(
            name=name,
            brand=kwargs.pop('brand', 'Acme'),
            model=kwargs.pop('model', 'M1'),
            sku=sku,
            regular_price=to_money(regular_price),
            sale_price=to_money(sale_price),
            cost=kwargs.pop('cost', Decimal('1.00')),
            stock_quantity=stock_quantity,
            **kwargs
        )
        product.generate_slug()
        for index, category in enumerate(categories):
            product.category_links.append(
                ProductCategory(category_id=category.id, is_primary=index == 0)
            )
        if image_url:
            product.images.append(ProductImage(image_url=image_url, is_primary=True))
        _db.session.add(product)
        _db.session.commit()
        return product
    return _make
