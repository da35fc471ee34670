"""Wishlist use cases. Ownership checks belong to the calling route."""

from sqlalchemy.orm import selectinload

from storefront.errors import BusinessRuleError, NotFoundError, ValidationError
from storefront.extensions import db
from storefront.models import Product, Wishlist, WishlistItem
from storefront.models.wishlist import DEFAULT_WISHLIST_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def get_or_create_default(user_id):
    """Ensure the user has exactly one default wishlist and return it."""
    wishlist = Wishlist.query.filter_by(user_id=user_id, name=DEFAULT_WISHLIST_NAME).first()
    if wishlist is None:
        wishlist = Wishlist(user_id=user_id, name=DEFAULT_WISHLIST_NAME, is_public=False)
        db.session.add(wishlist)
        db.session.commit()
        logger.info("Created default wishlist for user %s", user_id)
    return wishlist


def get_wishlists(user_id):
    get_or_create_default(user_id)
    return Wishlist.query.options(selectinload(Wishlist.items)).filter_by(
        user_id=user_id
    ).order_by(Wishlist.created_at.asc()).all()


def get_wishlist(wishlist_id):
    """Wishlist with items, products and product images, or None."""
    return Wishlist.query.options(
        selectinload(Wishlist.items).selectinload(WishlistItem.product)
        .selectinload(Product.images)
    ).filter_by(id=wishlist_id).first()


def _check_name(name):
    name = (name or '').strip()
    if not name:
        raise ValidationError('Wishlist name is required', field='name')
    if name == DEFAULT_WISHLIST_NAME:
        raise ValidationError(f'"{DEFAULT_WISHLIST_NAME}" is a reserved name', field='name')
    return name


def create_wishlist(user_id, name, is_public=False):
    wishlist = Wishlist(user_id=user_id, name=_check_name(name), is_public=bool(is_public))
    db.session.add(wishlist)
    db.session.commit()
    logger.info("User %s created wishlist %s", user_id, wishlist.id)
    return wishlist


def update_wishlist(wishlist_id, name=None, is_public=None):
    wishlist = db.session.get(Wishlist, wishlist_id)
    if wishlist is None:
        raise NotFoundError('Wishlist', wishlist_id)

    if name is not None and name != wishlist.name:
        if wishlist.is_default:
            raise ValidationError('The default wishlist cannot be renamed', field='name')
        wishlist.name = _check_name(name)
    if is_public is not None:
        wishlist.is_public = is_public

    db.session.commit()
    return wishlist


def delete_wishlist(wishlist_id):
    wishlist = db.session.get(Wishlist, wishlist_id)
    if wishlist is None:
        raise NotFoundError('Wishlist', wishlist_id)
    if wishlist.is_default:
        logger.warning("Refused to delete default wishlist %s", wishlist_id)
        raise BusinessRuleError('Cannot delete the default wishlist')

    db.session.delete(wishlist)
    db.session.commit()
    logger.info("Deleted wishlist %s", wishlist_id)
    return True


def add_item(wishlist_id, product_id, notes=None):
    """Save a product; adding it again only updates the notes."""
    product = db.session.get(Product, product_id) if product_id else None
    if product is None:
        raise NotFoundError('Product', product_id)
    wishlist = db.session.get(Wishlist, wishlist_id)
    if wishlist is None:
        raise NotFoundError('Wishlist', wishlist_id)

    item = WishlistItem.query.filter_by(wishlist_id=wishlist.id, product_id=product.id).first()
    if item:
        if notes is not None:
            item.notes = notes
    else:
        item = WishlistItem(wishlist_id=wishlist.id, product_id=product.id, notes=notes)
        db.session.add(item)
        logger.info("Wishlist %s: added product %s", wishlist.id, product.id)

    db.session.commit()
    return item


def remove_item(wishlist_id, item_id):
    item = WishlistItem.query.filter_by(id=item_id, wishlist_id=wishlist_id).first()
    if item is None:
        raise NotFoundError('Wishlist item', item_id)

    db.session.delete(item)
    db.session.commit()
    return True
