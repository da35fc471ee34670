"""Cart routes.

Signed-in callers use their principal; guests are identified by the
session id cookie or header.
"""

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from storefront.errors import NotFoundError, ValidationError
from storefront.forms import validate_json
from storefront.forms.cart import CartItemForm, CartItemUpdateForm
from storefront.services import cart as cart_service
from storefront.utils.identity import current_identity, request_session_id

cart_bp = Blueprint('cart', __name__)


@cart_bp.route('', methods=['GET'])
def view_cart():
    """Get the caller's active cart."""
    user_id, session_id = current_identity()
    cart = cart_service.get_cart(user_id, session_id)
    return jsonify(cart.to_dict())


@cart_bp.route('', methods=['DELETE'])
def clear_cart():
    """Empty the cart."""
    user_id, session_id = current_identity()
    cart_service.clear_cart(user_id, session_id)
    return '', 204


@cart_bp.route('/items', methods=['POST'])
def add_to_cart():
    """Add product to cart."""
    user_id, session_id = current_identity()
    form, _ = validate_json(CartItemForm)

    item = cart_service.add_item(
        user_id=user_id,
        session_id=session_id,
        product_id=form.product_id.data,
        quantity=form.quantity.data
    )
    data = item.to_dict()
    data['cart'] = item.cart.summary()
    return jsonify(data), 201


@cart_bp.route('/items/<item_id>', methods=['PUT'])
def update_cart_item(item_id):
    """Update cart item quantity."""
    user_id, session_id = current_identity()
    form, _ = validate_json(CartItemUpdateForm)

    item = cart_service.update_item(item_id, form.quantity.data, user_id, session_id)
    if item is None:
        raise NotFoundError('Cart item', item_id)

    data = item.to_dict()
    data['cart'] = item.cart.summary()
    return jsonify(data)


@cart_bp.route('/items/<item_id>', methods=['DELETE'])
def remove_from_cart(item_id):
    """Remove item from cart."""
    user_id, session_id = current_identity()
    if not cart_service.remove_item(item_id, user_id, session_id):
        raise NotFoundError('Cart item', item_id)
    return '', 204


@cart_bp.route('/merge', methods=['POST'])
@login_required
def merge_cart():
    """Fold the guest cart of this browser session into the user's cart."""
    session_id = request_session_id()
    if not session_id:
        raise ValidationError('Session ID is required to merge a guest cart')

    cart_service.merge_guest_cart(current_user.id, session_id)
    cart = cart_service.get_cart(user_id=current_user.id)
    return jsonify(cart.to_dict())
