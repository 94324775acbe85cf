"""Notification dispatch and delivery collaborators."""

from .dispatcher import NotificationDispatcher, BulkResult, TEMPLATES, render
from .transport import UserDirectory, Transport, TemplateDirectory, LoggingTransport, SmtpTransport

__all__ = [
    'NotificationDispatcher',
    'BulkResult',
    'TEMPLATES',
    'render',
    'UserDirectory',
    'Transport',
    'TemplateDirectory',
    'LoggingTransport',
    'SmtpTransport'
]
