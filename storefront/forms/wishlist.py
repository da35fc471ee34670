"""Wishlist forms."""

from flask_wtf import FlaskForm
from wtforms import BooleanField, StringField, TextAreaField
from wtforms.validators import InputRequired, Length, Optional


class WishlistForm(FlaskForm):
    name = StringField('Name', validators=[
        InputRequired(message='Wishlist name is required'),
        Length(max=100, message='Name must be at most 100 characters')
    ])
    is_public = BooleanField('Public')


class WishlistUpdateForm(FlaskForm):
    name = StringField('Name', validators=[
        Optional(),
        Length(max=100, message='Name must be at most 100 characters')
    ])
    is_public = BooleanField('Public')


class WishlistItemForm(FlaskForm):
    product_id = StringField('Product', validators=[
        InputRequired(message='Product ID is required')
    ])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=500)])
