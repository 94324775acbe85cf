"""
Utility commands for the orderdesk CLI.
Provides helper commands for schema setup and diagnostics.
"""

import click

from ..cli.base import BaseCommand, command_error_handler
from ..cli.config import Config

class TestConnectionCommand(BaseCommand):
    """Command to test database connectivity."""
    
    def __init__(self, config: Config):
        super().__init__(config)
    
    @command_error_handler
    def execute(self) -> None:
        """Execute the connection test."""
        self.logger.info("Testing database connection...")
        self.pool.check()
        click.secho("Successfully connected to the database!", fg='green')

class InitDbCommand(BaseCommand):
    """Command to create the order tables."""

    @command_error_handler
    def execute(self) -> None:
        """Create any missing tables."""
        self.pool.create_schema()
        click.secho("Database schema is ready.", fg='green')

__all__ = ['TestConnectionCommand', 'InitDbCommand']
