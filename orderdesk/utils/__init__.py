"""Utility functions and helpers."""

from .uuid import generate_uuid
from .error_tracker import ErrorTracker

__all__ = [
    'generate_uuid',
    'ErrorTracker'
]
