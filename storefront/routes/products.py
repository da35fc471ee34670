"""Product catalog routes."""

from flask import Blueprint, current_app, jsonify

from storefront.errors import NotFoundError, ValidationError
from storefront.forms import json_payload, string_list, validate_args, validate_json
from storefront.forms.catalog import (CategoryForm, ProductForm, ProductQueryForm,
                                      ProductUpdateForm, RelatedQueryForm)
from storefront.services import catalog
from storefront.utils.decorators import capability_required

products_bp = Blueprint('products', __name__)


def _image_payload(payload):
    """Validate the optional ``images`` list of {url, alt_text} objects."""
    images = payload.get('images') or []
    if not isinstance(images, list):
        raise ValidationError('images must be a list', field='images')
    for image in images:
        if not isinstance(image, dict) or not isinstance(image.get('url'), str) \
                or not image['url'].strip():
            raise ValidationError('Each image needs a url', field='images')
    return images


@products_bp.route('', methods=['GET'])
def list_products():
    """Browse active products with filters, sorting and pagination."""
    form = validate_args(ProductQueryForm)
    result = catalog.list_products(
        filters=form.filters(),
        page=form.page.data,
        limit=form.per_page,
        sort=form.sort.data or 'created_at',
        order=form.order.data or 'desc'
    )
    return jsonify({
        'products': [p.to_dict(images='primary') for p in result['products']],
        'total_items': result['total_items'],
        'total_pages': result['total_pages'],
        'current_page': result['current_page'],
    })


@products_bp.route('/categories', methods=['GET'])
def list_categories():
    return jsonify([c.to_dict() for c in catalog.list_categories()])


@products_bp.route('/categories', methods=['POST'])
@capability_required('catalog:write')
def create_category():
    form, data = validate_json(CategoryForm)
    category = catalog.create_category(data)
    return jsonify(category.to_dict()), 201


@products_bp.route('/<identifier>', methods=['GET'])
def product_detail(identifier):
    """Product by id or slug."""
    product = catalog.get_product_by_identifier(identifier)
    return jsonify(product.to_dict())


@products_bp.route('/<product_id>/related', methods=['GET'])
def related_products(product_id):
    form = validate_args(RelatedQueryForm)
    limit = form.limit.data or current_app.config['RELATED_PRODUCTS_LIMIT']
    products = catalog.related_products(product_id, limit=limit)
    return jsonify([p.to_dict(images='primary', categories=False) for p in products])


@products_bp.route('', methods=['POST'])
@capability_required('catalog:write')
def create_product():
    """Create a product with optional category ids and image URLs."""
    payload = json_payload()
    form, data = validate_json(ProductForm, payload)
    data['categories'] = string_list(payload, 'categories')
    data['images'] = _image_payload(payload)

    product = catalog.create_product(data)
    return jsonify(product.to_dict()), 201


@products_bp.route('/<product_id>', methods=['PUT'])
@capability_required('catalog:write')
def update_product(product_id):
    payload = json_payload()
    form, data = validate_json(ProductUpdateForm, payload)
    if 'categories' in payload:
        data['categories'] = string_list(payload, 'categories')

    product = catalog.update_product(product_id, data)
    if product is None:
        raise NotFoundError('Product', product_id)
    return jsonify(product.to_dict())


@products_bp.route('/<product_id>', methods=['DELETE'])
@capability_required('catalog:write')
def delete_product(product_id):
    if not catalog.delete_product(product_id):
        raise NotFoundError('Product', product_id)
    return '', 204


@products_bp.route('/<product_id>/images', methods=['POST'])
@capability_required('catalog:write')
def upload_images(product_id):
    """Register already-hosted image URLs for a product."""
    image_urls = string_list(json_payload(), 'image_urls', required=True)
    images = catalog.add_product_images(product_id, image_urls)
    return jsonify([image.to_dict() for image in images]), 201
