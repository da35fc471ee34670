from datetime import timedelta

from storefront.cli import CATEGORIES, PRODUCTS
from storefront.models import Cart, Category, Product
from storefront.services import cart as cart_service
from storefront.utils.helpers import utcnow


def test_seed_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed'])
    assert result.exit_code == 0
    assert f'Created {len(CATEGORIES)} categories and {len(PRODUCTS)} products.' in result.output
    assert Category.query.count() == len(CATEGORIES)
    assert Product.query.count() == len(PRODUCTS)

    headphones = Product.query.filter_by(sku='SNY-WH1000XM5').one()
    assert [c.name for c in headphones.categories] == ['Audio', 'Accessories']
    assert headphones.primary_image is not None

    result = runner.invoke(args=['seed'])
    assert 'already seeded' in result.output
    assert Product.query.count() == len(PRODUCTS)


def test_expire_carts_command(app, db):
    cart = cart_service.get_cart(session_id='old-session')
    cart.expires_at = utcnow() - timedelta(days=1)
    db.session.commit()

    result = app.test_cli_runner().invoke(args=['carts', 'expire'])
    assert result.exit_code == 0
    assert 'Abandoned 1 expired guest cart(s).' in result.output
    assert db.session.get(Cart, cart.id).status == 'abandoned'
