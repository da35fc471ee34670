"""Checkout and order management.

Payment collection happens outside this service; an order only records the
chosen method and starts with a pending payment status.
"""

from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from storefront.errors import BusinessRuleError, ValidationError
from storefront.extensions import db
from storefront.models import Cart, Order, OrderItem, Product
from storefront.models.order import ORDER_STATUSES, PAYMENT_METHODS
from storefront.utils.helpers import to_money, money_json, total_pages
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SHIPPING_FIELDS = ('full_name', 'email', 'phone', 'address', 'city', 'postal_code', 'country')


def quote(subtotal):
    """Tax and shipping for a cart subtotal."""
    config = current_app.config
    subtotal = to_money(subtotal)
    tax = to_money(subtotal * Decimal(str(config['TAX_RATE'])))
    if subtotal >= to_money(config['FREE_SHIPPING_THRESHOLD']):
        shipping = to_money(0)
    else:
        shipping = to_money(config['FLAT_SHIPPING_COST'])
    return {
        'subtotal': subtotal,
        'tax': tax,
        'shipping_cost': shipping,
        'total_amount': subtotal + tax + shipping,
    }


def checkout(user_id, shipping, payment_method, notes=None):
    """Convert the user's active cart into a pending order."""
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError('Unsupported payment method', field='payment_method')

    cart = Cart.query.filter_by(user_id=user_id, status='active').first()
    if cart is None or not cart.items:
        raise BusinessRuleError('Your cart is empty.')

    # Re-validate every line against the live catalog
    for cart_item in cart.items:
        product = cart_item.product
        if not product.is_active:
            raise ValidationError(f'{product.name} is no longer available',
                                  field='items', details={'product_id': product.id})
        if product.stock_quantity < cart_item.quantity:
            raise ValidationError(f'Not enough stock available for {product.name}',
                                  field='items',
                                  details={'product_id': product.id,
                                           'available': product.stock_quantity})

    subtotal = sum((i.price * i.quantity for i in cart.items), Decimal('0.00'))
    pricing = quote(subtotal)

    order = Order(
        order_number=Order.generate_order_number(),
        user_id=user_id,
        cart_id=cart.id,
        payment_method=payment_method,
        notes=notes,
        **pricing,
        **{field: shipping.get(field) for field in SHIPPING_FIELDS}
    )

    for cart_item in cart.items:
        order.items.append(OrderItem(
            product_id=cart_item.product_id,
            product_name=cart_item.product.name,
            product_sku=cart_item.product.sku,
            quantity=cart_item.quantity,
            unit_price=cart_item.price,
            total_price=cart_item.price * cart_item.quantity
        ))
        # Reduce stock
        cart_item.product.stock_quantity -= cart_item.quantity

    order.add_status_history('pending', 'Order placed')
    cart.status = 'converted'
    db.session.add(order)
    db.session.commit()

    logger.info("Order %s placed by %s for %s", order.order_number, user_id, order.total_amount)
    return order


def list_orders(user_id=None, page=1, limit=10, status=None):
    """Orders newest first; user_id None lists every user's orders."""
    if status and status not in ORDER_STATUSES:
        raise ValidationError('Unknown order status', field='status')

    query = Order.query
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    if status:
        query = query.filter_by(status=status)

    pagination = query.order_by(Order.created_at.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return {
        'orders': pagination.items,
        'total_items': pagination.total,
        'total_pages': total_pages(pagination.total, limit),
        'current_page': page,
    }


def get_order(order_number):
    return Order.query.filter_by(order_number=order_number).first()


def cancel_order(order, reason=None):
    if not order.can_cancel():
        raise BusinessRuleError('This order cannot be cancelled.')

    reason = reason or 'Customer requested cancellation'
    order.status = 'cancelled'
    order.cancellation_reason = reason
    order.add_status_history('cancelled', reason)

    # Restore stock
    for item in order.items:
        if item.product is not None:
            item.product.stock_quantity += item.quantity

    db.session.commit()
    logger.info("Order %s cancelled", order.order_number)
    return order


def update_status(order, status, notes=None):
    if status not in ORDER_STATUSES:
        raise ValidationError('Unknown order status', field='status')
    if status == 'cancelled':
        return cancel_order(order, notes)
    if order.status in ('cancelled', 'delivered'):
        raise BusinessRuleError(f'Order is already {order.status}.')

    order.status = status
    order.add_status_history(status, notes)
    db.session.commit()
    logger.info("Order %s moved to %s", order.order_number, status)
    return order


def sales_summary():
    """Order counts by status and revenue from orders that were not cancelled."""
    counts = dict(
        db.session.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    )
    revenue = db.session.query(
        func.sum(Order.total_amount)
    ).filter(Order.status != 'cancelled').scalar() or 0

    return {
        'orders_by_status': {status: counts.get(status, 0) for status in ORDER_STATUSES},
        'total_orders': sum(counts.values()),
        'revenue': money_json(to_money(revenue)),
    }


def inventory_summary():
    """Stock overview for staff dashboards."""
    threshold = current_app.config['LOW_STOCK_THRESHOLD']
    low_stock = Product.query.filter(
        Product.is_active == True,
        Product.stock_quantity <= threshold
    ).order_by(Product.stock_quantity.asc()).all()

    return {
        'total_products': Product.query.count(),
        'active_products': Product.query.filter_by(is_active=True).count(),
        'out_of_stock': Product.query.filter_by(is_active=True, stock_quantity=0).count(),
        'low_stock_threshold': threshold,
        'low_stock': [
            {'id': p.id, 'name': p.name, 'sku': p.sku, 'stock_quantity': p.stock_quantity}
            for p in low_stock
        ],
    }
