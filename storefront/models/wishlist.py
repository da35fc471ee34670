"""Wishlist and WishlistItem models."""

from storefront.extensions import db
from storefront.utils.helpers import new_id, utcnow

DEFAULT_WISHLIST_NAME = 'Default Wishlist'


class Wishlist(db.Model):
    """Named product collection owned by a user."""
    __tablename__ = 'wishlists'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False, default=DEFAULT_WISHLIST_NAME)
    is_public = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    items = db.relationship('WishlistItem', backref='wishlist', cascade='all, delete-orphan',
                            order_by='WishlistItem.added_at')

    @property
    def is_default(self):
        return self.name == DEFAULT_WISHLIST_NAME

    def is_visible_to(self, user_id):
        return self.is_public or self.user_id == user_id

    def to_dict(self, include_items=True):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'is_public': self.is_public,
            'is_default': self.is_default,
            'item_count': len(self.items),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data

    def __repr__(self):
        return f'<Wishlist {self.name}>'


class WishlistItem(db.Model):
    """Product saved to a wishlist."""
    __tablename__ = 'wishlist_items'
    __table_args__ = (
        db.UniqueConstraint('wishlist_id', 'product_id', name='uq_wishlist_product'),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    wishlist_id = db.Column(db.String(36), db.ForeignKey('wishlists.id', ondelete='CASCADE'),
                            nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'),
                           nullable=False, index=True)
    notes = db.Column(db.String(500))
    added_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        data = {
            'id': self.id,
            'wishlist_id': self.wishlist_id,
            'product_id': self.product_id,
            'notes': self.notes,
            'added_at': self.added_at.isoformat() if self.added_at else None,
        }
        if self.product is not None:
            data['product'] = self.product.to_dict(images='primary', categories=False)
        return data

    def __repr__(self):
        return f'<WishlistItem {self.product_id}>'
