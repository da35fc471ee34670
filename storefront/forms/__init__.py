"""Request body and query validation.

Forms are bound to JSON objects rather than HTML form posts. Only scalar
values go through the form; list fields are read with ``string_list``.
"""

from flask import request
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, DecimalField, IntegerField

from storefront.errors import ValidationError


def json_payload():
    """The request's JSON object body ({} when empty)."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def bind(form_class, payload):
    """Instantiate form_class over the scalar, non-null values of payload."""
    formdata = MultiDict({
        key: value for key, value in payload.items()
        if value is not None and not isinstance(value, (list, dict))
    })
    return form_class(formdata=formdata)


def check_json_types(form, payload):
    """Add field errors for JSON values WTForms would coerce silently.

    Booleans must be JSON booleans, and numeric fields reject booleans.
    Integer fields also reject floats with a fractional part.
    """
    for field in form:
        value = payload.get(field.name)
        if value is None:
            continue
        if isinstance(field, BooleanField):
            if not isinstance(value, bool):
                field.errors.append('Must be true or false.')
        elif isinstance(field, IntegerField):
            if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
                field.errors.append('Not a valid integer value.')
        elif isinstance(field, DecimalField) and isinstance(value, bool):
            field.errors.append('Not a valid decimal value.')


def validate_json(form_class, payload=None):
    """Validate a JSON body; return (form, fields actually sent)."""
    payload = json_payload() if payload is None else payload
    form = bind(form_class, payload)
    form.validate()
    check_json_types(form, payload)
    if form.errors:
        raise ValidationError.from_form(form)
    sent = {
        field.name: (field.data if payload[field.name] is not None else None)
        for field in form if field.name in payload
    }
    return form, sent


def validate_args(form_class):
    """Validate query string arguments."""
    form = form_class(formdata=request.args)
    if not form.validate():
        raise ValidationError.from_form(form)
    return form


def string_list(payload, key, required=False):
    """Read a list of non-empty strings from a JSON payload."""
    value = payload.get(key)
    if value is None:
        if required:
            raise ValidationError(f'{key} is required', field=key)
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise ValidationError(f'{key} must be a list of strings', field=key)
    return [v.strip() for v in value]
