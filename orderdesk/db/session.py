"""Database connection pool and transaction management."""
import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy import create_engine, text
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from ..errors import OrderDeskError, PoolExhaustedError, TransactionError
from .models import Base

T = TypeVar('T')


class ConnectionPool:
    """Bounded pool of database connections.

    Constructed once at startup and disposed at shutdown. Services receive the
    pool through their constructor.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        pool_recycle: int = 30,
        pool_timeout: Optional[float] = None,
        echo: bool = False
    ):
        """Create the engine.

        Args:
            database_url: SQLAlchemy database URL
            pool_size: Maximum number of concurrently checked-out connections
            pool_recycle: Seconds after which an idle connection is replaced
            pool_timeout: Seconds to wait for a free connection; None waits forever
            echo: Log every statement
        """
        self.logger = logging.getLogger(__name__)
        self.pool_timeout = pool_timeout
        self.engine = create_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=0,
            pool_recycle=pool_recycle,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
            echo=echo
        )
        self.logger.debug(f"Created pool for {self.engine.url!r} (size={pool_size})")

    def bind_session(self, connection) -> Session:
        """Get a new session pinned to one checked-out connection."""
        session = Session(bind=connection, autoflush=False, expire_on_commit=False)
        self.logger.debug(f"Created new session: {id(session)}")
        return session

    def connect(self):
        """Check a raw connection out of the pool."""
        try:
            return self.engine.connect()
        except PoolTimeoutError as e:
            raise PoolExhaustedError(self.pool_timeout, e) from e

    def run_in_transaction(self, unit_of_work: Callable[[Session], T]) -> T:
        """Run ``unit_of_work`` atomically on a single connection.

        The session handed to ``unit_of_work`` is bound to one connection for
        the whole call. Commits when it returns, rolls back when it raises.
        Errors from orderdesk itself are re-raised as they are; anything else
        is wrapped in TransactionError with the original as its cause. The
        connection is released on every path.
        """
        connection = self.connect()
        session = self.bind_session(connection)
        session_id = id(session)
        try:
            transaction = connection.begin()
            self.logger.debug(f"Began transaction on session: {session_id}")
            try:
                result = unit_of_work(session)
                session.flush()
                self.logger.debug(f"Committing session: {session_id}")
                transaction.commit()
            except BaseException:
                self.logger.debug(f"Rolling back session: {session_id}")
                self._rollback(session, transaction)
                raise
            return result
        except OrderDeskError:
            raise
        except Exception as e:
            raise TransactionError(e) from e
        finally:
            self.logger.debug(f"Closing session: {session_id}")
            try:
                session.close()
            finally:
                connection.close()

    def _rollback(self, session: Session, transaction) -> None:
        try:
            if transaction.is_active:
                transaction.rollback()
        except Exception as e:
            # The original failure is the one worth reporting
            self.logger.error(f"Rollback failed on session {id(session)}: {e}")

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self.engine)
        self.logger.info("Database schema created")

    def check(self) -> bool:
        """Round-trip a trivial statement."""
        with self.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.logger.debug("Disposing connection pool")
        self.engine.dispose()

    def __enter__(self) -> 'ConnectionPool':
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.dispose()
