"""Order models."""

import uuid

from storefront.extensions import db
from storefront.utils.helpers import new_id, utcnow, money_json

ORDER_STATUSES = ('pending', 'processing', 'shipped', 'delivered', 'cancelled')
PAYMENT_METHODS = ('mpesa', 'credit_card', 'cash_on_delivery')
PAYMENT_STATUSES = ('pending', 'paid', 'failed', 'refunded')


class Order(db.Model):
    """Order placed from a converted cart."""
    __tablename__ = 'orders'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_number = db.Column(db.String(50), unique=True, nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    cart_id = db.Column(db.String(36), db.ForeignKey('carts.id'))

    # Pricing
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)
    tax = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    shipping_cost = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    discount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)

    # Status
    status = db.Column(db.String(20), nullable=False, default='pending')
    payment_method = db.Column(db.String(20), nullable=False)
    payment_status = db.Column(db.String(20), nullable=False, default='pending')

    # Shipping address snapshot
    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    address = db.Column(db.String(500), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    postal_code = db.Column(db.String(20))
    country = db.Column(db.String(100))

    notes = db.Column(db.Text)
    cancellation_reason = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    items = db.relationship('OrderItem', backref='order', cascade='all, delete-orphan')
    status_history = db.relationship('OrderStatusHistory', backref='order',
                                     cascade='all, delete-orphan',
                                     order_by='OrderStatusHistory.created_at')

    @staticmethod
    def generate_order_number():
        """Generate a unique order number."""
        timestamp = utcnow().strftime('%Y%m%d%H%M')
        unique_id = uuid.uuid4().hex[:6].upper()
        return f'G20{timestamp}{unique_id}'

    def add_status_history(self, status, notes=None):
        """Add a status change to history."""
        self.status_history.append(OrderStatusHistory(status=status, notes=notes))

    def can_cancel(self):
        """Check if order can be cancelled."""
        return self.status in ('pending', 'processing')

    def to_dict(self, include_items=True):
        data = {
            'id': self.id,
            'order_number': self.order_number,
            'user_id': self.user_id,
            'status': self.status,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
            'subtotal': money_json(self.subtotal),
            'tax': money_json(self.tax),
            'shipping_cost': money_json(self.shipping_cost),
            'discount': money_json(self.discount),
            'total_amount': money_json(self.total_amount),
            'shipping_address': {
                'full_name': self.full_name,
                'email': self.email,
                'phone': self.phone,
                'address': self.address,
                'city': self.city,
                'postal_code': self.postal_code,
                'country': self.country,
            },
            'notes': self.notes,
            'cancellation_reason': self.cancellation_reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
            data['status_history'] = [h.to_dict() for h in self.status_history]
        return data

    def __repr__(self):
        return f'<Order {self.order_number}>'


class OrderItem(db.Model):
    """Order line, a snapshot of the cart line at checkout."""
    __tablename__ = 'order_items'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_id = db.Column(db.String(36), db.ForeignKey('orders.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id', ondelete='SET NULL'))
    product_name = db.Column(db.String(200), nullable=False)
    product_sku = db.Column(db.String(64))
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    product = db.relationship('Product')

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'product_sku': self.product_sku,
            'quantity': self.quantity,
            'unit_price': money_json(self.unit_price),
            'total_price': money_json(self.total_price),
        }

    def __repr__(self):
        return f'<OrderItem {self.product_name} x {self.quantity}>'


class OrderStatusHistory(db.Model):
    """Order status history model."""
    __tablename__ = 'order_status_history'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_id = db.Column(db.String(36), db.ForeignKey('orders.id', ondelete='CASCADE'),
                         nullable=False)
    status = db.Column(db.String(20), nullable=False)
    notes = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'status': self.status,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<OrderStatusHistory {self.status}>'
