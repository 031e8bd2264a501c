"""Database models."""

from storefront.models.user import User
from storefront.models.two_factor import TwoFactorAuth
from storefront.models.product import Product
from storefront.models.cart_item import CartItem

__all__ = [
    "User",
    "TwoFactorAuth",
    "Product",
    "CartItem",
]
