"""Order lifecycle and notification backend."""

from .db import ConnectionPool, Repository
from .services import OrderService
from .notifications import NotificationDispatcher

__all__ = ['ConnectionPool', 'Repository', 'OrderService', 'NotificationDispatcher']
