"""Cart and CartItem models."""

from decimal import Decimal

from storefront.extensions import db
from storefront.utils.helpers import new_id, utcnow, money_json

CART_STATUSES = ('active', 'merged', 'converted', 'abandoned')


class Cart(db.Model):
    """Shopping cart owned by a user or by an anonymous session."""
    __tablename__ = 'carts'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(64), index=True)
    session_id = db.Column(db.String(128), index=True)
    status = db.Column(db.Enum(*CART_STATUSES, name='cart_status'),
                       nullable=False, default='active')
    # Denormalized, written only by recompute_totals()
    item_count = db.Column(db.Integer, nullable=False, default=0)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0.00'))
    expires_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    items = db.relationship('CartItem', backref='cart', cascade='all, delete-orphan',
                            order_by='CartItem.created_at')

    @property
    def is_guest(self):
        return self.user_id is None

    def summary(self):
        return {
            'id': self.id,
            'status': self.status,
            'item_count': self.item_count,
            'total_amount': money_json(self.total_amount),
        }

    def to_dict(self):
        data = self.summary()
        data.update({
            'user_id': self.user_id,
            'session_id': self.session_id,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'items': [item.to_dict() for item in self.items],
        })
        return data

    def __repr__(self):
        return f'<Cart {self.id} {self.status}>'


class CartItem(db.Model):
    """Line in a cart. Price is a snapshot taken when the line is written."""
    __tablename__ = 'cart_items'
    __table_args__ = (
        db.UniqueConstraint('cart_id', 'product_id', name='uq_cart_product'),
        db.CheckConstraint('quantity >= 1', name='ck_cart_items_quantity_positive'),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    cart_id = db.Column(db.String(36), db.ForeignKey('carts.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'),
                           nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def set_quantity(self, quantity, price=None):
        """Write quantity (and optionally a fresh price) and the line total."""
        if price is not None:
            self.price = price
        self.quantity = quantity
        self.total_price = self.price * quantity

    def to_dict(self, include_product=True):
        data = {
            'id': self.id,
            'cart_id': self.cart_id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'price': money_json(self.price),
            'total_price': money_json(self.total_price),
        }
        if include_product and self.product is not None:
            data['product'] = self.product.to_dict(images='primary', categories=False)
        return data

    def __repr__(self):
        return f'<CartItem {self.product_id} x {self.quantity}>'
