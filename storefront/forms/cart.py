"""Cart request forms."""

from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import InputRequired, NumberRange


class CartItemForm(FlaskForm):
    """Add-to-cart body."""
    product_id = StringField('Product', validators=[
        InputRequired(message='Product ID is required')
    ])
    quantity = IntegerField('Quantity', default=1, validators=[
        NumberRange(min=1, message='Valid quantity is required')
    ])


class CartItemUpdateForm(FlaskForm):
    """Quantity change body."""
    quantity = IntegerField('Quantity', validators=[
        InputRequired(message='Valid quantity is required'),
        NumberRange(min=1, message='Valid quantity is required')
    ])
