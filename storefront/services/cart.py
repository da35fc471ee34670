"""Cart use cases.

Every function takes the caller identity as ``user_id`` / ``session_id``;
the user id wins when both are given. Cart totals are never adjusted
incrementally: after any item change they are recomputed from the rows
in the database.
"""

from datetime import timedelta
from decimal import Decimal

from flask import current_app
from sqlalchemy import func
from sqlalchemy.orm import selectinload

from storefront.errors import NotFoundError, ValidationError
from storefront.extensions import db
from storefront.models import Cart, CartItem, Product
from storefront.models.cart import CART_STATUSES
from storefront.utils.helpers import utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _owner_filter(user_id, session_id):
    if user_id:
        return {'user_id': user_id}
    if session_id:
        return {'session_id': session_id}
    raise ValidationError('User ID or Session ID is required')


def _find_active_cart(user_id, session_id):
    return Cart.query.filter_by(status='active', **_owner_filter(user_id, session_id)).first()


def get_or_create_cart(user_id=None, session_id=None):
    """Resolve the caller's single active cart, creating it when absent."""
    owner = _owner_filter(user_id, session_id)
    now = utcnow()
    guest_ttl = timedelta(hours=current_app.config['GUEST_CART_TTL_HOURS'])
    cart = Cart.query.filter_by(status='active', **owner).first()
    if cart and cart.is_guest and cart.expires_at and cart.expires_at < now:
        logger.info("Guest cart %s expired, abandoning", cart.id)
        cart.status = 'abandoned'
        cart = None
    if cart:
        if cart.is_guest:
            # Activity keeps a guest cart alive
            cart.expires_at = now + guest_ttl
        return cart

    cart = Cart(status='active', **owner)
    if 'session_id' in owner:
        cart.expires_at = now + guest_ttl
    db.session.add(cart)
    db.session.flush()
    logger.info("Created cart %s for %s", cart.id, owner)
    return cart


def get_cart(user_id=None, session_id=None):
    """Cart with items, their products and each product's images."""
    cart = get_or_create_cart(user_id, session_id)
    db.session.commit()
    return Cart.query.options(
        selectinload(Cart.items).selectinload(CartItem.product).selectinload(Product.images)
    ).filter_by(id=cart.id).one()


def recompute_totals(cart):
    """Rewrite item_count and total_amount from the persisted items."""
    db.session.flush()
    items = CartItem.query.filter_by(cart_id=cart.id).all()
    cart.item_count = sum(i.quantity for i in items)
    cart.total_amount = sum((i.price * i.quantity for i in items), Decimal('0.00'))
    return cart


def check_quantity(product, quantity):
    """Validate a resulting line quantity against stock and order limits."""
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ValidationError('Valid quantity is required', field='quantity')
    if product.stock_quantity < quantity:
        raise ValidationError(
            'Not enough stock available',
            field='quantity',
            details={'available': product.stock_quantity, 'requested': quantity},
        )
    if quantity < (product.min_order_quantity or 1):
        raise ValidationError(
            f'Minimum order quantity is {product.min_order_quantity}', field='quantity'
        )
    if product.max_order_quantity is not None and quantity > product.max_order_quantity:
        raise ValidationError(
            f'Maximum order quantity is {product.max_order_quantity}', field='quantity'
        )


def add_item(user_id=None, session_id=None, product_id=None, quantity=1):
    """Add a product to the cart, summing into an existing line."""
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ValidationError('Valid quantity is required', field='quantity')

    product = db.session.get(Product, product_id) if product_id else None
    if not product:
        raise NotFoundError('Product', product_id)
    if not product.is_active:
        raise ValidationError('Product is not available', field='product_id')
    if product.stock_quantity < quantity:
        raise ValidationError(
            'Not enough stock available',
            field='quantity',
            details={'available': product.stock_quantity, 'requested': quantity},
        )

    cart = get_or_create_cart(user_id, session_id)
    item = CartItem.query.filter_by(cart_id=cart.id, product_id=product.id).first()
    new_quantity = item.quantity + quantity if item else quantity
    check_quantity(product, new_quantity)

    price = product.effective_price
    if item:
        logger.info("Cart %s: product %s quantity %s -> %s",
                    cart.id, product.id, item.quantity, new_quantity)
        item.set_quantity(new_quantity, price=price)
    else:
        logger.info("Cart %s: adding product %s x %s", cart.id, product.id, quantity)
        item = CartItem(cart_id=cart.id, product_id=product.id)
        item.set_quantity(quantity, price=price)
        db.session.add(item)

    recompute_totals(cart)
    db.session.commit()
    return item


def _find_scoped_item(item_id, user_id, session_id):
    return CartItem.query.join(Cart).filter(
        CartItem.id == item_id,
        Cart.status == 'active',
    ).filter_by(**_owner_filter(user_id, session_id)).first()


def update_item(item_id, quantity, user_id=None, session_id=None):
    """Set a line's quantity. Returns None when the caller has no such line."""
    item = _find_scoped_item(item_id, user_id, session_id)
    if item is None:
        return None

    check_quantity(item.product, quantity)
    item.set_quantity(quantity)
    recompute_totals(item.cart)
    db.session.commit()
    logger.info("Cart %s: item %s quantity set to %s", item.cart_id, item.id, quantity)
    return item


def remove_item(item_id, user_id=None, session_id=None):
    """Delete a line. Returns False when the caller has no such line."""
    item = _find_scoped_item(item_id, user_id, session_id)
    if item is None:
        return False

    cart = item.cart
    cart.items.remove(item)
    recompute_totals(cart)
    db.session.commit()
    logger.info("Cart %s: removed item %s", cart.id, item_id)
    return True


def clear_cart(user_id=None, session_id=None):
    """Delete every line of the caller's active cart."""
    cart = _find_active_cart(user_id, session_id)
    if cart is None:
        return None

    CartItem.query.filter_by(cart_id=cart.id).delete(synchronize_session=False)
    db.session.expire(cart, ['items'])
    recompute_totals(cart)
    db.session.commit()
    logger.info("Cart %s cleared", cart.id)
    return cart


def merge_guest_cart(user_id, session_id):
    """Fold the guest cart of session_id into the user's cart.

    Products already in the user cart keep the user cart's quantity.
    Products only in the guest cart are moved over, clamped to current
    stock; inactive or sold-out products are dropped. The guest cart ends
    in status ``merged``.
    """
    if not user_id or not session_id:
        raise ValidationError('User ID and Session ID are required')

    user_cart = get_or_create_cart(user_id=user_id)
    guest_cart = _find_active_cart(None, session_id)
    if guest_cart is None or guest_cart.id == user_cart.id:
        db.session.commit()
        return user_cart

    owned = {item.product_id for item in user_cart.items}
    moved = dropped = 0
    for guest_item in list(guest_cart.items):
        product = guest_item.product
        if guest_item.product_id in owned:
            continue
        if not product.is_active or product.stock_quantity < 1:
            dropped += 1
            continue
        quantity = min(guest_item.quantity, product.stock_quantity)
        if product.max_order_quantity is not None:
            quantity = min(quantity, product.max_order_quantity)
        if quantity < (product.min_order_quantity or 1):
            dropped += 1
            continue
        item = CartItem(product_id=product.id)
        item.set_quantity(quantity, price=guest_item.price)
        user_cart.items.append(item)
        moved += 1

    guest_cart.status = 'merged'
    recompute_totals(user_cart)
    db.session.commit()
    logger.info("Merged guest cart %s into %s: %s moved, %s dropped",
                guest_cart.id, user_cart.id, moved, dropped)
    return user_cart


def expire_guest_carts(now=None):
    """Mark active guest carts past their expiry as abandoned."""
    now = now or utcnow()
    expired = Cart.query.filter(
        Cart.status == 'active',
        Cart.user_id.is_(None),
        Cart.expires_at.isnot(None),
        Cart.expires_at < now,
    ).all()
    for cart in expired:
        cart.status = 'abandoned'
    db.session.commit()
    if expired:
        logger.info("Abandoned %s expired guest carts", len(expired))
    return len(expired)


def cart_status_counts():
    """Number of carts in each lifecycle status."""
    counts = dict(
        db.session.query(Cart.status, func.count(Cart.id)).group_by(Cart.status).all()
    )
    return {status: counts.get(status, 0) for status in CART_STATUSES}
