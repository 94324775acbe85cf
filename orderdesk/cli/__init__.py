"""
CLI module for the orderdesk package.
Provides command-line interface functionality and utilities.

The click entry point lives in ``orderdesk.cli.main``.
"""

from .base import BaseCommand
from .config import Config
from .logging import setup_logging, get_logger

__all__ = ['BaseCommand', 'Config', 'setup_logging', 'get_logger']
