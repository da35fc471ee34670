"""Checkout and order forms."""

from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import AnyOf, Email, InputRequired, Length, NumberRange, Optional

from storefront.models.order import ORDER_STATUSES, PAYMENT_METHODS


class CheckoutForm(FlaskForm):
    """Checkout form with shipping information."""
    full_name = StringField('Full Name', validators=[
        InputRequired(message='Full name is required'),
        Length(max=150)
    ])
    email = StringField('Email', validators=[
        InputRequired(message='Email is required'),
        Email(message='Please enter a valid email address')
    ])
    phone = StringField('Phone', validators=[
        InputRequired(message='Phone number is required'),
        Length(min=7, max=20, message='Please enter a valid phone number')
    ])
    address = TextAreaField('Delivery Address', validators=[
        InputRequired(message='Delivery address is required'),
        Length(max=500)
    ])
    city = StringField('City', validators=[
        InputRequired(message='City is required'),
        Length(max=100)
    ])
    postal_code = StringField('Postal Code', validators=[Optional(), Length(max=20)])
    country = StringField('Country', validators=[Optional(), Length(max=100)])
    payment_method = StringField('Payment Method', validators=[
        InputRequired(message='Payment method is required'),
        AnyOf(PAYMENT_METHODS, message='Unsupported payment method')
    ])
    notes = TextAreaField('Order Notes', validators=[Optional(), Length(max=1000)])


class OrderQueryForm(FlaskForm):
    page = IntegerField('Page', default=1, validators=[NumberRange(min=1)])
    limit = IntegerField('Limit', default=10, validators=[NumberRange(min=1, max=100)])
    status = StringField('Status', validators=[
        Optional(), AnyOf(ORDER_STATUSES, message='Unknown order status')
    ])
    scope = StringField('Scope', default='own', validators=[
        AnyOf(['own', 'all'], message="scope must be 'own' or 'all'")
    ])


class OrderStatusForm(FlaskForm):
    status = StringField('Status', validators=[
        InputRequired(message='Status is required'),
        AnyOf(ORDER_STATUSES, message='Unknown order status')
    ])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=500)])


class CancelOrderForm(FlaskForm):
    reason = TextAreaField('Reason', validators=[Optional(), Length(max=500)])
