"""Catalog forms."""

from flask import current_app
from flask_wtf import FlaskForm
from wtforms import BooleanField, DecimalField, IntegerField, StringField, TextAreaField
from wtforms.validators import (AnyOf, InputRequired, Length, NumberRange, Optional,
                                ValidationError)


class ProductQueryForm(FlaskForm):
    """Listing query string."""
    page = IntegerField('Page', default=1, validators=[
        NumberRange(min=1, message='page must be at least 1')
    ])
    limit = IntegerField('Limit', validators=[Optional()])
    sort = StringField('Sort', default='created_at')
    order = StringField('Order', default='desc', validators=[
        AnyOf(['asc', 'desc'], message="order must be 'asc' or 'desc'")
    ])
    category = StringField('Category', validators=[Optional()])
    brand = StringField('Brand', validators=[Optional()])
    search = StringField('Search', validators=[Optional(), Length(max=200)])
    min_price = DecimalField('Minimum price', validators=[Optional(), NumberRange(min=0)])
    max_price = DecimalField('Maximum price', validators=[Optional(), NumberRange(min=0)])
    featured = StringField('Featured', validators=[
        Optional(),
        AnyOf(['true', 'false'], message="featured must be 'true' or 'false'")
    ])

    def validate_limit(self, field):
        maximum = current_app.config['MAX_ITEMS_PER_PAGE']
        if field.data is not None and not 1 <= field.data <= maximum:
            raise ValidationError(f'limit must be between 1 and {maximum}')

    def validate_max_price(self, field):
        if (field.data is not None and self.min_price.data is not None
                and field.data < self.min_price.data):
            raise ValidationError('max_price must not be below min_price')

    @property
    def per_page(self):
        return self.limit.data or current_app.config['ITEMS_PER_PAGE']

    def filters(self):
        """Filters for list_products; unset values are left out."""
        filters = {
            'category': self.category.data or None,
            'brand': self.brand.data or None,
            'search': (self.search.data or '').strip() or None,
            'min_price': self.min_price.data,
            'max_price': self.max_price.data,
        }
        if self.featured.data:
            filters['featured'] = self.featured.data == 'true'
        return {key: value for key, value in filters.items() if value is not None}


class RelatedQueryForm(FlaskForm):
    limit = IntegerField('Limit', validators=[Optional(), NumberRange(min=1, max=20)])


class ProductForm(FlaskForm):
    """Product create body. ``categories`` and ``images`` are read separately."""
    name = StringField('Name', validators=[
        InputRequired(message='Name is required'),
        Length(max=200)
    ])
    brand = StringField('Brand', validators=[InputRequired(message='Brand is required'),
                                             Length(max=100)])
    model = StringField('Model', validators=[InputRequired(message='Model is required'),
                                             Length(max=100)])
    sku = StringField('SKU', validators=[InputRequired(message='SKU is required'),
                                         Length(max=50)])
    description = TextAreaField('Description', validators=[Optional()])
    regular_price = DecimalField('Regular price', validators=[
        InputRequired(message='Regular price is required'),
        NumberRange(min=0, message='Price cannot be negative')
    ])
    sale_price = DecimalField('Sale price', validators=[
        Optional(), NumberRange(min=0, message='Price cannot be negative')
    ])
    cost = DecimalField('Cost', validators=[
        InputRequired(message='Cost is required'),
        NumberRange(min=0, message='Cost cannot be negative')
    ])
    stock_quantity = IntegerField('Stock', validators=[
        Optional(), NumberRange(min=0, message='Stock quantity cannot be negative')
    ])
    min_order_quantity = IntegerField('Minimum order', validators=[
        Optional(), NumberRange(min=1)
    ])
    max_order_quantity = IntegerField('Maximum order', validators=[
        Optional(), NumberRange(min=1)
    ])
    slug = StringField('Slug', validators=[Optional(), Length(max=220)])
    is_active = BooleanField('Active')
    featured = BooleanField('Featured')


class ProductUpdateForm(ProductForm):
    """Partial product update: every field is optional."""
    name = StringField('Name', validators=[Optional(), Length(min=1, max=200)])
    brand = StringField('Brand', validators=[Optional(), Length(max=100)])
    model = StringField('Model', validators=[Optional(), Length(max=100)])
    sku = StringField('SKU', validators=[Optional(), Length(max=50)])
    regular_price = DecimalField('Regular price', validators=[
        Optional(), NumberRange(min=0, message='Price cannot be negative')
    ])
    cost = DecimalField('Cost', validators=[
        Optional(), NumberRange(min=0, message='Cost cannot be negative')
    ])


class CategoryForm(FlaskForm):
    """Category create body."""
    name = StringField('Name', validators=[
        InputRequired(message='Name is required'),
        Length(max=100)
    ])
    description = TextAreaField('Description', validators=[Optional()])
    slug = StringField('Slug', validators=[Optional(), Length(max=120)])
    parent_id = StringField('Parent', validators=[Optional()])
    image_url = StringField('Image URL', validators=[Optional(), Length(max=500)])
    display_order = IntegerField('Display order', validators=[Optional()])
    is_active = BooleanField('Active')
