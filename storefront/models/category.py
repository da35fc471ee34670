"""Category and ProductCategory models."""

from storefront.extensions import db
from storefront.utils.helpers import new_id, utcnow, generate_unique_slug


class Category(db.Model):
    """Product category, optionally nested under a parent."""
    __tablename__ = 'categories'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    slug = db.Column(db.String(120), unique=True, nullable=False, index=True)
    parent_id = db.Column(db.String(36), db.ForeignKey('categories.id'))
    image_url = db.Column(db.String(500))
    display_order = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    # Self-referencing tree
    parent = db.relationship('Category', remote_side=[id], backref='children')
    product_links = db.relationship('ProductCategory', backref='category',
                                    cascade='all, delete-orphan')

    def generate_slug(self):
        """Derive a unique slug from the category name."""
        self.slug = generate_unique_slug(Category, self.name, exclude_id=self.id,
                                         fallback='category')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'image_url': self.image_url,
            'parent_id': self.parent_id,
            'display_order': self.display_order,
        }

    def __repr__(self):
        return f'<Category {self.name}>'


class ProductCategory(db.Model):
    """Junction row linking a product to a category."""
    __tablename__ = 'product_categories'
    __table_args__ = (
        db.UniqueConstraint('product_id', 'category_id', name='uq_product_category'),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    category_id = db.Column(db.String(36), db.ForeignKey('categories.id', ondelete='CASCADE'),
                            nullable=False, index=True)
    is_primary = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def __repr__(self):
        return f'<ProductCategory {self.product_id} -> {self.category_id}>'
