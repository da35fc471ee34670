"""Small helpers shared by models and services."""

import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from slugify import slugify

CENT = Decimal('0.01')


def new_id():
    """Generate a primary key value."""
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp, matching what the database hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_money(value):
    """Coerce a number to a two-place Decimal."""
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_json(value):
    """Render a money value for a JSON body."""
    return float(value) if value is not None else None


def total_pages(total, per_page):
    return math.ceil(total / per_page) if per_page else 0


def generate_unique_slug(model, text, exclude_id=None, fallback='item'):
    """Slugify text, appending -1, -2, ... until no other row of model owns it."""
    base_slug = slugify(text) if text else fallback
    slug = base_slug
    counter = 1
    while True:
        query = model.query.filter_by(slug=slug)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        if query.first() is None:
            return slug
        slug = f"{base_slug}-{counter}"
        counter += 1
