"""SQLAlchemy models for database tables."""

from .base import Base
from .order import Order, OrderStatus, utcnow
from .order_item import OrderItem, LineItem

__all__ = [
    'Base',
    'Order',
    'OrderStatus',
    'OrderItem',
    'LineItem',
    'utcnow'
]
