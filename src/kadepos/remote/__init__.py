"""Clients for the hosted backend."""
from .orders import OrderAPI, OrderItemRow, RestOrderAPI

__all__ = ["OrderAPI", "OrderItemRow", "RestOrderAPI"]
