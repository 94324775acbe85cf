"""Shared test fixtures and utilities."""

import threading
from decimal import Decimal

import pytest

from ..db.models import LineItem
from ..db.repository import Repository
from ..db.session import ConnectionPool
from ..notifications import NotificationDispatcher
from ..services import OrderService


class FakeDirectory:
    """User directory that fails for a configured set of users."""

    def __init__(self, failing=()):
        self.failing = {str(user_id) for user_id in failing}
        self.lookups = []
        self._lock = threading.Lock()

    def resolve_address(self, user_id):
        with self._lock:
            self.lookups.append(str(user_id))
        if str(user_id) in self.failing:
            raise LookupError(f"no such user: {user_id}")
        return f"{user_id}@example.com"


class RecordingTransport:
    """Transport that records messages, optionally failing every delivery."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self._lock = threading.Lock()

    def deliver(self, recipient, subject, body):
        if self.fail:
            raise ConnectionError("mail relay unavailable")
        with self._lock:
            self.sent.append((recipient, subject, body))


@pytest.fixture
def database_url(tmp_path):
    """SQLite database file so the bounded QueuePool is used."""
    return f"sqlite:///{tmp_path / 'orders.db'}"


@pytest.fixture
def pool(database_url):
    """Connection pool with the schema created."""
    pool = ConnectionPool(database_url, pool_size=5, pool_recycle=30, pool_timeout=5)
    pool.create_schema()
    yield pool
    pool.dispose()


@pytest.fixture
def repository(pool):
    return Repository(pool)


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def dispatcher(directory, transport):
    return NotificationDispatcher(directory, transport, max_workers=4)


@pytest.fixture
def service(pool, dispatcher, repository):
    return OrderService(pool, dispatcher, repository)


@pytest.fixture
def sample_items():
    """Two lines totalling 35."""
    return [
        LineItem(product_id='widget', quantity=2, unit_price=Decimal('10')),
        LineItem(product_id='gadget', quantity=3, unit_price=Decimal('5')),
    ]


def count_rows(repository, table, where='', params=None):
    """Count rows in a table through the raw query helper."""
    statement = f'SELECT COUNT(*) AS n FROM "{table}"'
    if where:
        statement += f' WHERE {where}'
    return repository.query(statement, params).rows[0]['n']
