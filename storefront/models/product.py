"""Product and ProductImage models."""

from storefront.extensions import db
from storefront.utils.helpers import (new_id, utcnow, money_json,
                                      generate_unique_slug)


class Product(db.Model):
    """Catalog product."""
    __tablename__ = 'products'
    __table_args__ = (
        db.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_non_negative'),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(200), nullable=False)
    brand = db.Column(db.String(100), nullable=False, index=True)
    model = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    sku = db.Column(db.String(64), unique=True, nullable=False)
    regular_price = db.Column(db.Numeric(10, 2), nullable=False)
    sale_price = db.Column(db.Numeric(10, 2))
    cost = db.Column(db.Numeric(10, 2), nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    min_order_quantity = db.Column(db.Integer, nullable=False, default=1)
    max_order_quantity = db.Column(db.Integer)
    slug = db.Column(db.String(220), unique=True, nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    featured = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    images = db.relationship('ProductImage', backref='product',
                             cascade='all, delete-orphan',
                             order_by='ProductImage.display_order')
    category_links = db.relationship('ProductCategory', backref='product',
                                     cascade='all, delete-orphan')
    categories = db.relationship('Category', secondary='product_categories',
                                 viewonly=True, order_by='Category.display_order')
    cart_items = db.relationship('CartItem', backref='product', lazy='dynamic',
                                 cascade='all, delete-orphan')
    wishlist_items = db.relationship('WishlistItem', backref='product', lazy='dynamic',
                                     cascade='all, delete-orphan')

    @property
    def effective_price(self):
        """Sale price when one is set, otherwise the regular price."""
        if self.sale_price is not None:
            return self.sale_price
        return self.regular_price

    @property
    def primary_image(self):
        """The image flagged primary, else the first by display order."""
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None

    def generate_slug(self):
        """Derive a unique slug from the product name."""
        self.slug = generate_unique_slug(Product, self.name, exclude_id=self.id,
                                         fallback='product')

    def is_in_stock(self, quantity=1):
        return self.is_active and self.stock_quantity >= quantity

    def to_dict(self, images='all', categories=True):
        data = {
            'id': self.id,
            'name': self.name,
            'brand': self.brand,
            'model': self.model,
            'description': self.description,
            'sku': self.sku,
            'slug': self.slug,
            'regular_price': money_json(self.regular_price),
            'sale_price': money_json(self.sale_price),
            'price': money_json(self.effective_price),
            'stock_quantity': self.stock_quantity,
            'min_order_quantity': self.min_order_quantity,
            'max_order_quantity': self.max_order_quantity,
            'is_active': self.is_active,
            'featured': self.featured,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if images == 'all':
            data['images'] = [image.to_dict() for image in self.images]
        elif images == 'primary':
            primary = self.primary_image
            data['images'] = [primary.to_dict()] if primary else []
        if categories:
            data['categories'] = [
                {'id': c.id, 'name': c.name, 'slug': c.slug} for c in self.categories
            ]
        return data

    def __repr__(self):
        return f'<Product {self.name}>'


class ProductImage(db.Model):
    """Image attached to a product."""
    __tablename__ = 'product_images'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    image_url = db.Column(db.String(500), nullable=False)
    alt_text = db.Column(db.String(255))
    display_order = db.Column(db.Integer, nullable=False, default=0)
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'image_url': self.image_url,
            'alt_text': self.alt_text,
            'display_order': self.display_order,
            'is_primary': self.is_primary,
        }

    def __repr__(self):
        return f'<ProductImage {self.image_url}>'
