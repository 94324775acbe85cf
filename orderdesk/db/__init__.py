"""Database access: connection pool, transactions and repository helpers."""

from .session import ConnectionPool
from .repository import Repository, QueryResult

__all__ = ['ConnectionPool', 'Repository', 'QueryResult']
