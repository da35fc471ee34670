"""Wishlist routes."""

from flask import Blueprint, jsonify
from flask_login import current_user

from storefront.errors import AuthorizationError, NotFoundError
from storefront.forms import validate_json
from storefront.forms.wishlist import WishlistForm, WishlistItemForm, WishlistUpdateForm
from storefront.services import wishlist as wishlist_service
from storefront.utils.decorators import capability_required

wishlist_bp = Blueprint('wishlist', __name__)


def _visible_wishlist(wishlist_id):
    wishlist = wishlist_service.get_wishlist(wishlist_id)
    if wishlist is None:
        raise NotFoundError('Wishlist', wishlist_id)
    if not wishlist.is_visible_to(current_user.id):
        raise AuthorizationError('You do not have access to this wishlist')
    return wishlist


def _owned_wishlist(wishlist_id):
    wishlist = wishlist_service.get_wishlist(wishlist_id)
    if wishlist is None:
        raise NotFoundError('Wishlist', wishlist_id)
    if wishlist.user_id != current_user.id:
        raise AuthorizationError('Only the owner can change this wishlist')
    return wishlist


@wishlist_bp.route('', methods=['GET'])
@capability_required('wishlist')
def list_wishlists():
    """All of the user's wishlists, oldest first."""
    wishlists = wishlist_service.get_wishlists(current_user.id)
    return jsonify([w.to_dict(include_items=False) for w in wishlists])


@wishlist_bp.route('/<wishlist_id>', methods=['GET'])
@capability_required('wishlist')
def view_wishlist(wishlist_id):
    return jsonify(_visible_wishlist(wishlist_id).to_dict())


@wishlist_bp.route('', methods=['POST'])
@capability_required('wishlist')
def create_wishlist():
    form, _ = validate_json(WishlistForm)
    wishlist = wishlist_service.create_wishlist(
        current_user.id, form.name.data, is_public=form.is_public.data
    )
    return jsonify(wishlist.to_dict()), 201


@wishlist_bp.route('/<wishlist_id>', methods=['PUT'])
@capability_required('wishlist')
def update_wishlist(wishlist_id):
    _owned_wishlist(wishlist_id)
    form, data = validate_json(WishlistUpdateForm)
    wishlist = wishlist_service.update_wishlist(
        wishlist_id,
        name=data.get('name'),
        is_public=data.get('is_public')
    )
    return jsonify(wishlist.to_dict())


@wishlist_bp.route('/<wishlist_id>', methods=['DELETE'])
@capability_required('wishlist')
def delete_wishlist(wishlist_id):
    _owned_wishlist(wishlist_id)
    wishlist_service.delete_wishlist(wishlist_id)
    return '', 204


@wishlist_bp.route('/<wishlist_id>/items', methods=['POST'])
@capability_required('wishlist')
def add_wishlist_item(wishlist_id):
    """Save a product to the wishlist."""
    _owned_wishlist(wishlist_id)
    form, data = validate_json(WishlistItemForm)
    item = wishlist_service.add_item(wishlist_id, form.product_id.data, notes=data.get('notes'))
    return jsonify(item.to_dict()), 201


@wishlist_bp.route('/<wishlist_id>/items/<item_id>', methods=['DELETE'])
@capability_required('wishlist')
def remove_wishlist_item(wishlist_id, item_id):
    _owned_wishlist(wishlist_id)
    wishlist_service.remove_item(wishlist_id, item_id)
    return '', 204
