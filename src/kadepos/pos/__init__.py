"""Point-of-sale cart and checkout."""
from .cart import Cart
from .checkout import CheckoutResult, checkout

__all__ = ["Cart", "CheckoutResult", "checkout"]
