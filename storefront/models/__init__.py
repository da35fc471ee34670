"""Database models package."""

from .product import Product, ProductImage
from .category import Category, ProductCategory
from .cart import Cart, CartItem
from .wishlist import Wishlist, WishlistItem
from .order import Order, OrderItem, OrderStatusHistory

__all__ = [
    'Product',
    'ProductImage',
    'Category',
    'ProductCategory',
    'Cart',
    'CartItem',
    'Wishlist',
    'WishlistItem',
    'Order',
    'OrderItem',
    'OrderStatusHistory',
]
