"""Delivery collaborators used by the notification dispatcher."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol


class UserDirectory(Protocol):
    """Resolves a user id to a delivery address."""

    def resolve_address(self, user_id: str) -> str:
        ...


class Transport(Protocol):
    """Delivers one message; raises on failure."""

    def deliver(self, recipient: str, subject: str, body: str) -> None:
        ...


class TemplateDirectory:
    """Derive addresses from a format string such as ``user{user_id}@example.com``."""

    def __init__(self, template: str = 'user{user_id}@example.com'):
        self.template = template

    def resolve_address(self, user_id: str) -> str:
        return self.template.format(user_id=user_id)


class LoggingTransport:
    """Transport that only writes the message to the log."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def deliver(self, recipient: str, subject: str, body: str) -> None:
        self.logger.info(f"To: {recipient} | Subject: {subject} | {body}")


class SmtpTransport:
    """Send plain-text mail through an SMTP relay."""

    def __init__(self, host: str = 'localhost', port: int = 25, sender: str = 'orders@example.com', timeout: float = 10.0):
        self.host = host
        self.port = port
        self.sender = sender
        self.timeout = timeout

    def deliver(self, recipient: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message['From'] = self.sender
        message['To'] = recipient
        message['Subject'] = subject
        message.set_content(body)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.send_message(message)
