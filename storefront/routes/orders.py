"""Order routes."""

from flask import Blueprint, jsonify
from flask_login import current_user

from storefront.errors import AuthorizationError, NotFoundError
from storefront.forms import validate_args, validate_json
from storefront.forms.orders import (CancelOrderForm, CheckoutForm, OrderQueryForm,
                                     OrderStatusForm)
from storefront.services import orders as order_service
from storefront.services.orders import SHIPPING_FIELDS
from storefront.utils.decorators import capability_required

orders_bp = Blueprint('orders', __name__)


def _get_order_for(order_number, staff_capability):
    """Order visible to its owner or to staff holding staff_capability."""
    order = order_service.get_order(order_number)
    if order is None:
        raise NotFoundError('Order', order_number)
    if order.user_id != current_user.id and not current_user.can(staff_capability):
        raise AuthorizationError('You do not have access to this order')
    return order


@orders_bp.route('/checkout', methods=['POST'])
@capability_required('orders:own')
def checkout():
    """Place an order from the active cart."""
    form, _ = validate_json(CheckoutForm)
    shipping = {field: getattr(form, field).data for field in SHIPPING_FIELDS}

    order = order_service.checkout(
        current_user.id,
        shipping,
        payment_method=form.payment_method.data,
        notes=form.notes.data or None
    )
    return jsonify(order.to_dict()), 201


@orders_bp.route('', methods=['GET'])
@capability_required('orders:own')
def list_orders():
    """The caller's orders; staff may pass scope=all."""
    form = validate_args(OrderQueryForm)
    user_id = current_user.id
    if form.scope.data == 'all':
        if not current_user.can('orders:all'):
            raise AuthorizationError('Missing capability: orders:all',
                                     details={'capability': 'orders:all'})
        user_id = None

    result = order_service.list_orders(
        user_id=user_id,
        page=form.page.data,
        limit=form.limit.data,
        status=form.status.data or None
    )
    return jsonify({
        'orders': [o.to_dict(include_items=False) for o in result['orders']],
        'total_items': result['total_items'],
        'total_pages': result['total_pages'],
        'current_page': result['current_page'],
    })


@orders_bp.route('/<order_number>', methods=['GET'])
@capability_required('orders:own')
def order_detail(order_number):
    return jsonify(_get_order_for(order_number, 'orders:all').to_dict())


@orders_bp.route('/<order_number>/cancel', methods=['POST'])
@capability_required('orders:own')
def cancel_order(order_number):
    """Cancel an order that has not shipped yet."""
    order = _get_order_for(order_number, 'orders:manage')
    form, _ = validate_json(CancelOrderForm)
    order = order_service.cancel_order(order, form.reason.data or None)
    return jsonify(order.to_dict())


@orders_bp.route('/<order_number>/status', methods=['PUT'])
@capability_required('orders:manage')
def update_order_status(order_number):
    order = order_service.get_order(order_number)
    if order is None:
        raise NotFoundError('Order', order_number)
    form, _ = validate_json(OrderStatusForm)
    order = order_service.update_status(order, form.status.data, form.notes.data or None)
    return jsonify(order.to_dict())
