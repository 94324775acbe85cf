"""
Base command infrastructure for the orderdesk CLI.
Provides common functionality and utilities for all commands.
"""

import click
import functools
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from .config import Config
from ..db.session import ConnectionPool
from ..notifications import LoggingTransport, NotificationDispatcher, SmtpTransport, TemplateDirectory
from ..services import OrderService
from ..utils import ErrorTracker


class BaseCommand(ABC):
    """Base class for all CLI commands."""

    def __init__(self, config: Config):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.error_tracker = ErrorTracker()
        self._pool: Optional[ConnectionPool] = None
        self._dispatcher: Optional[NotificationDispatcher] = None

        # Get debug status from click context
        ctx = click.get_current_context(silent=True)
        self.debug = bool(ctx and ctx.obj and ctx.obj.get('debug'))
        if self.debug:
            self.logger.debug(f"Debug mode enabled for {self.__class__.__name__}")

    @property
    def pool(self) -> ConnectionPool:
        """Get or create the connection pool."""
        if self._pool is None:
            if self.debug:
                self.logger.debug(f"Creating connection pool for {self.config.database_url}")
            self._pool = ConnectionPool(
                self.config.database_url,
                pool_size=self.config.pool_size,
                pool_recycle=self.config.pool_recycle,
                pool_timeout=self.config.pool_timeout
            )
        return self._pool

    @property
    def dispatcher(self) -> NotificationDispatcher:
        """Get or create the notification dispatcher."""
        if self._dispatcher is None:
            if self.config.transport == 'smtp':
                transport = SmtpTransport(self.config.smtp_host, self.config.smtp_port, self.config.sender)
            else:
                transport = LoggingTransport()
            self._dispatcher = NotificationDispatcher(
                TemplateDirectory(self.config.address_template),
                transport,
                max_workers=self.config.notify_max_workers
            )
        return self._dispatcher

    @property
    def order_service(self) -> OrderService:
        return OrderService(self.pool, self.dispatcher)

    def close(self) -> None:
        """Dispose of the connection pool if one was created."""
        if self._pool is not None:
            self._pool.dispose()
            self._pool = None

    @abstractmethod
    def execute(self) -> None:
        """Execute the command. Must be implemented by subclasses."""
        pass

    def validate(self) -> bool:
        """Validate command configuration and requirements.

        Returns:
            bool: True if validation passes, False otherwise
        """
        if self.debug:
            self.logger.debug("Validating command configuration")
        try:
            return self.config.validate()
        except ValueError as e:
            self.logger.error(f"Invalid configuration: {e}")
            return False


def command_error_handler(f):
    """Decorator to handle command execution errors consistently."""
    @functools.wraps(f)
    def wrapper(self, *args, **kwargs):
        start = time.time()
        try:
            if self.debug:
                self.logger.debug(f"Starting command execution: {f.__name__}")

            if not self.validate():
                raise click.Abort()

            result = f(self, *args, **kwargs)

            if self.debug:
                self.logger.debug(f"Command completed in {time.time() - start:.3f}s")

            return result

        except click.Abort:
            raise
        except Exception as e:
            self.error_tracker.add_error(
                getattr(e, 'kind', 'COMMAND_EXECUTION_ERROR'),
                f"Command failed: {str(e)}",
                {
                    'command': self.__class__.__name__,
                    'args': str(args),
                    'kwargs': str(kwargs)
                }
            )
            self.error_tracker.log_summary(self.logger)
            if self.debug:
                self.logger.debug(f"Command failed with error: {str(e)}", exc_info=True)
            click.secho(f"Error: {str(e)}", fg='red', err=True)
            raise click.Abort()
        finally:
            self.close()
    return wrapper
