"""Client-side state kept between visits.

A JSON file stands in for browser local storage. Each mirror owns one key
and follows the same lifecycle: ``load()`` reads it, every mutation saves
it, ``clear()`` removes it.
"""

import json
import os
from datetime import datetime, timezone

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CART_KEY = 'cartItems'
WISHLIST_KEY = 'wishlistItems'
SEARCH_HISTORY_KEY = 'searchHistory'
RECENTLY_VIEWED_KEY = 'recentlyViewedProducts'


def _timestamp():
    return datetime.now(timezone.utc).isoformat()


def unit_price(product):
    """Sale price, else regular price, else plain price, else 0."""
    for key in ('sale_price', 'regular_price', 'price'):
        if product.get(key):
            return float(product[key])
    return 0.0


class LocalStore:
    """Key/value store persisted as one JSON object on disk."""

    def __init__(self, path):
        self.path = path
        self._data = self._read()

    def _read(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Discarding unreadable store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Discarding malformed store %s", self.path)
            return {}
        return data

    def _write(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as fh:
            json.dump(self._data, fh)

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value
        self._write()

    def remove(self, key):
        if self._data.pop(key, None) is not None:
            self._write()


class _Mirror:
    key = None

    def __init__(self, store):
        self.store = store
        self.items = []
        self.load()

    def load(self):
        stored = self.store.get(self.key, [])
        self.items = stored if isinstance(stored, list) else []
        return self.items

    def save(self):
        self.store.set(self.key, self.items)

    def clear(self):
        self.items = []
        self.store.remove(self.key)


class CartMirror(_Mirror):
    """Guest cart lines keyed by product id."""
    key = CART_KEY

    def load(self):
        super().load()
        self._recompute()
        return self.items

    def _recompute(self):
        self.count = sum(item.get('quantity', 0) for item in self.items)
        self.total = round(sum(
            (item.get('price') or 0) * item.get('quantity', 0) for item in self.items
        ), 2)

    def save(self):
        self._recompute()
        super().save()

    def clear(self):
        super().clear()
        self._recompute()

    def _find(self, product_id):
        for item in self.items:
            if item.get('id') == product_id:
                return item
        return None

    def add(self, product, quantity=1):
        if not product or not product.get('id'):
            raise ValueError('product must have an id')
        item = self._find(product['id'])
        if item:
            item['quantity'] += quantity
            if item.get('price') is None:
                item['price'] = unit_price(product)
        else:
            self.items.append(dict(product, price=unit_price(product), quantity=quantity,
                                   added_at=_timestamp()))
        self.save()

    def remove(self, product_id):
        self.items = [item for item in self.items if item.get('id') != product_id]
        self.save()

    def update_quantity(self, product_id, quantity):
        """Set a line's quantity; zero or less removes it."""
        if quantity <= 0:
            self.remove(product_id)
            return
        item = self._find(product_id)
        if item:
            item['quantity'] = quantity
            self.save()

    def replace_from_server(self, cart_payload):
        """Adopt the server cart (``Cart.to_dict`` shape) as the local copy."""
        items = []
        for line in cart_payload.get('items', []):
            product = dict(line.get('product') or {'id': line['product_id']})
            product.update(price=line['price'], quantity=line['quantity'])
            items.append(product)
        self.items = items
        self.save()


class WishlistMirror(_Mirror):
    key = WISHLIST_KEY

    @property
    def count(self):
        return len(self.items)

    def contains(self, product_id):
        return any(item.get('id') == product_id for item in self.items)

    def add(self, product):
        if self.contains(product['id']):
            return False
        self.items.append(dict(product, added_at=_timestamp()))
        self.save()
        return True

    def remove(self, product_id):
        self.items = [item for item in self.items if item.get('id') != product_id]
        self.save()

    def toggle(self, product):
        """Add or remove; returns True when the product is now saved."""
        if self.contains(product['id']):
            self.remove(product['id'])
            return False
        return self.add(product)


class SearchHistory(_Mirror):
    """Most recent search terms first, without duplicates."""
    key = SEARCH_HISTORY_KEY

    def __init__(self, store, limit=5):
        self.limit = limit
        super().__init__(store)

    def record(self, term):
        term = (term or '').strip()
        if not term:
            return
        self.items = ([term] + [t for t in self.items if t != term])[:self.limit]
        self.save()

    def remove(self, index):
        if 0 <= index < len(self.items):
            del self.items[index]
            self.save()


class RecentlyViewed(_Mirror):
    key = RECENTLY_VIEWED_KEY

    def __init__(self, store, limit=8):
        self.limit = limit
        super().__init__(store)

    def record(self, product):
        """Move product to the front, dropping the oldest past the limit."""
        if not product or not product.get('id'):
            raise ValueError('product must have an id')
        rest = [item for item in self.items if item.get('id') != product['id']]
        self.items = [dict(product, viewed_at=_timestamp())] + rest
        self.items = self.items[:self.limit]
        self.save()

    def remove(self, product_id):
        self.items = [item for item in self.items if item.get('id') != product_id]
        self.save()
