"""Catalog queries and admin catalog writes."""

import re

from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload

from storefront.errors import NotFoundError, ValidationError
from storefront.extensions import db
from storefront.models import Cart, CartItem, Category, Product, ProductCategory, ProductImage
from storefront.services import cart as cart_service
from storefront.utils.helpers import to_money, total_pages
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE,
)

EFFECTIVE_PRICE = func.coalesce(Product.sale_price, Product.regular_price)

SORTABLE_FIELDS = {
    'created_at': Product.created_at,
    'updated_at': Product.updated_at,
    'name': Product.name,
    'brand': Product.brand,
    'regular_price': Product.regular_price,
    'price': EFFECTIVE_PRICE,
    'stock_quantity': Product.stock_quantity,
}
SORT_ORDERS = ('asc', 'desc')

PRODUCT_FIELDS = (
    'name', 'brand', 'model', 'description', 'sku', 'regular_price', 'sale_price',
    'cost', 'stock_quantity', 'min_order_quantity', 'max_order_quantity', 'slug',
    'is_active', 'featured',
)
MONEY_FIELDS = ('regular_price', 'sale_price', 'cost')
NOT_NULL_FIELDS = (
    'name', 'brand', 'model', 'sku', 'regular_price', 'cost', 'stock_quantity',
    'min_order_quantity', 'is_active', 'featured',
)


def is_uuid(identifier):
    """True when identifier is a well-formed v1-v5 UUID string."""
    return bool(identifier) and UUID_PATTERN.match(identifier) is not None


def _with_media(query):
    return query.options(selectinload(Product.images), selectinload(Product.categories))


def list_products(filters=None, page=1, limit=10, sort='created_at', order='desc'):
    """Filter, sort and paginate active products."""
    filters = filters or {}
    sort_column = SORTABLE_FIELDS.get(sort)
    if sort_column is None:
        raise ValidationError(
            f"Cannot sort by '{sort}'. Allowed: {', '.join(SORTABLE_FIELDS)}", field='sort'
        )
    order = (order or 'desc').lower()
    if order not in SORT_ORDERS:
        raise ValidationError("order must be 'asc' or 'desc'", field='order')
    if page < 1:
        raise ValidationError('page must be at least 1', field='page')
    if limit < 1:
        raise ValidationError('limit must be at least 1', field='limit')

    query = Product.query.filter_by(is_active=True)

    if filters.get('brand'):
        query = query.filter(Product.brand == filters['brand'])
    if filters.get('min_price') is not None:
        query = query.filter(EFFECTIVE_PRICE >= to_money(filters['min_price']))
    if filters.get('max_price') is not None:
        query = query.filter(EFFECTIVE_PRICE <= to_money(filters['max_price']))
    if filters.get('search'):
        term = f"%{filters['search']}%"
        query = query.filter(
            or_(
                Product.name.ilike(term),
                Product.description.ilike(term),
                Product.model.ilike(term)
            )
        )
    if filters.get('category'):
        category = filters['category']
        query = query.filter(Product.category_links.any(
            ProductCategory.category.has(or_(Category.id == category, Category.slug == category))
        ))
    if filters.get('featured') is not None:
        query = query.filter(Product.featured == filters['featured'])

    ordering = sort_column.asc() if order == 'asc' else sort_column.desc()
    query = _with_media(query).order_by(ordering, Product.id)

    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    return {
        'products': pagination.items,
        'total_items': pagination.total,
        'total_pages': total_pages(pagination.total, limit),
        'current_page': page,
    }


def get_product_by_id(product_id):
    return _with_media(Product.query).filter_by(id=product_id).first()


def get_product_by_slug(slug):
    return _with_media(Product.query).filter_by(slug=slug, is_active=True).first()


def get_product_by_identifier(identifier):
    """Dispatch on the identifier's shape: UUID -> id lookup, else slug."""
    if is_uuid(identifier):
        product = get_product_by_id(identifier)
    else:
        product = get_product_by_slug(identifier)
    if product is None:
        raise NotFoundError('Product', identifier)
    return product


def related_products(product_id, limit=4):
    """Other active products sharing at least one category, newest first."""
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError('Product', product_id)

    category_ids = [category.id for category in product.categories]
    if not category_ids:
        return []

    return _with_media(Product.query).filter(
        Product.id != product.id,
        Product.is_active == True,
        Product.category_links.any(ProductCategory.category_id.in_(category_ids))
    ).order_by(Product.created_at.desc()).limit(limit).all()


def list_categories():
    return Category.query.filter_by(is_active=True).order_by(
        Category.display_order, Category.name
    ).all()


def create_category(data):
    parent_id = data.get('parent_id')
    if parent_id and db.session.get(Category, parent_id) is None:
        raise NotFoundError('Category', parent_id)

    category = Category(
        name=data['name'],
        description=data.get('description'),
        parent_id=parent_id or None,
        image_url=data.get('image_url'),
        display_order=data.get('display_order') or 0,
        is_active=data.get('is_active', True),
    )
    if data.get('slug'):
        if Category.query.filter_by(slug=data['slug']).first():
            raise ValidationError('Slug already in use', field='slug')
        category.slug = data['slug']
    else:
        category.generate_slug()

    db.session.add(category)
    db.session.commit()
    logger.info("Created category %s (%s)", category.name, category.slug)
    return category


# --- Admin product writes ---

def _apply_product_fields(product, data):
    for field in PRODUCT_FIELDS:
        if field not in data or field == 'slug':
            continue
        value = data[field]
        if value is None and field in NOT_NULL_FIELDS:
            raise ValidationError(f'{field} cannot be null', field=field)
        if field in MONEY_FIELDS:
            value = to_money(value)
        setattr(product, field, value)

    if product.stock_quantity is not None and product.stock_quantity < 0:
        raise ValidationError('Stock quantity cannot be negative', field='stock_quantity')
    if product.sale_price is not None and product.sale_price < 0:
        raise ValidationError('Sale price cannot be negative', field='sale_price')
    if (product.max_order_quantity is not None
            and product.max_order_quantity < (product.min_order_quantity or 1)):
        raise ValidationError('Maximum order quantity is below the minimum',
                              field='max_order_quantity')


def _set_slug(product, data, name_changed):
    slug = data.get('slug')
    if slug:
        taken = Product.query.filter(Product.slug == slug)
        if product.id:
            taken = taken.filter(Product.id != product.id)
        if taken.first():
            raise ValidationError('Slug already in use', field='slug')
        product.slug = slug
    elif not product.slug or name_changed:
        product.generate_slug()


def _link_categories(product, category_ids):
    categories = Category.query.filter(Category.id.in_(category_ids)).all()
    found = {category.id for category in categories}
    missing = [cid for cid in category_ids if cid not in found]
    if missing:
        raise ValidationError('Unknown category', field='categories',
                              details={'missing': missing})

    # Replace links; the first category is primary
    product.category_links = []
    db.session.flush()
    for index, category_id in enumerate(dict.fromkeys(category_ids)):
        product.category_links.append(
            ProductCategory(category_id=category_id, is_primary=index == 0)
        )


def create_product(data):
    """Create a product with optional categories and image URLs."""
    if Product.query.filter_by(sku=data.get('sku')).first():
        raise ValidationError('SKU already exists', field='sku')

    product = Product()
    _apply_product_fields(product, data)
    _set_slug(product, data, name_changed=False)
    db.session.add(product)

    if data.get('categories'):
        _link_categories(product, data['categories'])

    for index, image in enumerate(data.get('images') or []):
        product.images.append(ProductImage(
            image_url=image['url'],
            alt_text=image.get('alt_text') or product.name,
            display_order=index,
            is_primary=index == 0
        ))

    db.session.commit()
    logger.info("Created product %s (%s)", product.sku, product.id)
    return get_product_by_id(product.id)


def update_product(product_id, data):
    """Apply a partial update. Returns None when the product does not exist."""
    product = db.session.get(Product, product_id)
    if product is None:
        return None

    if 'sku' in data and data['sku'] != product.sku:
        if Product.query.filter_by(sku=data['sku']).first():
            raise ValidationError('SKU already exists', field='sku')

    name_changed = 'name' in data and data['name'] != product.name
    _apply_product_fields(product, data)
    _set_slug(product, data, name_changed=name_changed)

    if 'categories' in data:
        _link_categories(product, data['categories'])

    db.session.commit()
    logger.info("Updated product %s", product.id)
    return get_product_by_id(product.id)


def delete_product(product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        return False

    # Cart lines go with the product; their carts' totals must follow
    carts = Cart.query.filter(Cart.items.any(CartItem.product_id == product.id)).all()
    db.session.delete(product)
    for cart in carts:
        cart_service.recompute_totals(cart)
    db.session.commit()
    logger.info("Deleted product %s", product_id)
    return True


def add_product_images(product_id, image_urls):
    """Append images after the current highest display order."""
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError('Product', product_id)
    if not image_urls:
        raise ValidationError('No images provided', field='image_urls')

    last = ProductImage.query.filter_by(product_id=product.id).order_by(
        ProductImage.display_order.desc()
    ).first()
    start = last.display_order + 1 if last else 0

    images = []
    for index, url in enumerate(image_urls):
        image = ProductImage(
            product_id=product.id,
            image_url=url,
            alt_text=product.name,
            display_order=start + index,
            # Only the first image of a product without images becomes primary
            is_primary=last is None and index == 0
        )
        db.session.add(image)
        images.append(image)

    db.session.commit()
    logger.info("Added %s images to product %s", len(images), product.id)
    return images
