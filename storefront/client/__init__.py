"""Client-side storage mirrors."""

from .store import CartMirror, LocalStore, RecentlyViewed, SearchHistory, WishlistMirror

__all__ = ['LocalStore', 'CartMirror', 'WishlistMirror', 'SearchHistory', 'RecentlyViewed']
