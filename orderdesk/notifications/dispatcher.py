"""Best-effort notification dispatch.

Each entry point picks its own failure policy:

* ``send_notification`` raises DeliveryError.
* ``send_order_confirmation`` / ``send_order_cancellation`` raise
  NotificationError, which the order service catches and discards.
* ``send_password_reset`` lets the failure through unchanged; there is no
  other channel for credential recovery.
* ``send_welcome_email`` logs and returns False.
* ``send_bulk_notifications`` never raises for a single recipient and
  reports counts instead.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from ..errors import AddressLookupError, DeliveryError, NotificationError, OrderDeskError
from ..utils import ErrorTracker
from .transport import Transport, UserDirectory

# template name -> (subject, body)
TEMPLATES: Dict[str, Tuple[str, str]] = {
    'order-confirmation': ('Order Confirmation', 'Your order #{order_id} has been confirmed.'),
    'order-cancellation': ('Order Cancellation', 'Your order #{order_id} has been cancelled.'),
    'password-reset': ('Password Reset Request', 'Use this token to reset your password: {token}'),
    'welcome': ('Welcome!', 'Welcome to our platform!'),
}


def render(template: str, **context) -> Tuple[str, str]:
    """Return the (subject, body) pair for a named template."""
    subject, body = TEMPLATES[template]
    return subject, body.format(**context)


@dataclass
class BulkResult:
    """Outcome of a bulk send."""
    successful: int = 0
    failed: int = 0
    errors: Dict = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.successful + self.failed


class NotificationDispatcher:
    """Send notifications through a transport, resolving users via a directory."""

    def __init__(self, directory: UserDirectory, transport: Transport, max_workers: int = 8):
        """Initialize dispatcher.

        Args:
            directory: Resolves user ids to delivery addresses
            transport: Delivers rendered messages
            max_workers: Upper bound on concurrent sends in bulk mode
        """
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.directory = directory
        self.transport = transport
        self.max_workers = max_workers
        self.logger = logging.getLogger(self.__class__.__name__)

    def resolve_address(self, user_id) -> str:
        """Look up a user's address, normalising any failure to AddressLookupError."""
        try:
            address = self.directory.resolve_address(user_id)
        except AddressLookupError:
            raise
        except Exception as e:
            raise AddressLookupError(user_id, e) from e
        if not address:
            raise AddressLookupError(user_id)
        return address

    def send_notification(self, recipient: str, subject: str, body: str) -> None:
        """Deliver a single message.

        Raises:
            DeliveryError: If the transport fails
        """
        self.logger.info(f"Sending notification to {recipient}: {subject}")
        try:
            self.transport.deliver(recipient, subject, body)
        except Exception as e:
            raise DeliveryError(recipient, e) from e
        self.logger.info(f"Notification sent to {recipient}")

    def send_order_confirmation(self, order_id: str, user_id: str) -> None:
        """Tell a user their order was placed.

        Raises:
            NotificationError: If lookup or delivery fails
        """
        self._send_order_notice('order-confirmation', order_id, user_id)

    def send_order_cancellation(self, order_id: str, user_id: str) -> None:
        """Tell a user their order was cancelled.

        Raises:
            NotificationError: If lookup or delivery fails
        """
        self._send_order_notice('order-cancellation', order_id, user_id)

    def _send_order_notice(self, template: str, order_id: str, user_id: str) -> None:
        try:
            recipient = self.resolve_address(user_id)
            subject, body = render(template, order_id=order_id)
            self.send_notification(recipient, subject, body)
        except Exception as e:
            raise NotificationError(template, order_id, user_id, e) from e

    def send_password_reset(self, address: str, token: str) -> None:
        """Send a password reset token.

        Raises:
            DeliveryError: If the transport fails; the transport error is on ``original``
        """
        self.logger.info(f"Sending password reset email to {address}")
        subject, body = render('password-reset', token=token)
        try:
            self.send_notification(address, subject, body)
        except DeliveryError as e:
            self.logger.error(f"Failed to send password reset email to {address}: {e}")
            raise
        self.logger.info(f"Password reset email sent to {address}")

    def send_welcome_email(self, user_id: str) -> bool:
        """Welcome a new user. Never raises; returns whether the mail went out."""
        try:
            recipient = self.resolve_address(user_id)
            subject, body = render('welcome')
            self.send_notification(recipient, subject, body)
        except Exception as e:
            self.logger.error(f"Failed to send welcome email to user {user_id}: {e}")
            return False
        self.logger.info(f"Welcome email sent to user {user_id}")
        return True

    def _send_to_user(self, user_id, subject: str, body: str) -> None:
        recipient = self.resolve_address(user_id)
        self.send_notification(recipient, subject, body)

    def send_bulk_notifications(self, user_ids: Iterable, subject: str, body: str) -> BulkResult:
        """Send the same message to many users.

        Every recipient is handled independently on a bounded worker pool;
        all outcomes are collected before returning. Nothing is retried.
        """
        user_ids: List = list(user_ids)
        self.logger.info(f"Sending bulk notifications to {len(user_ids)} users")
        result = BulkResult()
        if not user_ids:
            return result

        tracker = ErrorTracker()
        workers = min(self.max_workers, len(user_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='notify') as executor:
            futures = {
                executor.submit(self._send_to_user, user_id, subject, body): user_id
                for user_id in user_ids
            }
            for future in as_completed(futures):
                user_id = futures[future]
                error = future.exception()
                if error is None:
                    result.successful += 1
                    continue
                result.failed += 1
                kind = error.kind if isinstance(error, OrderDeskError) else type(error).__name__
                tracker.add_error(kind, str(error), {'user_id': user_id})

        result.errors = tracker.get_summary()
        tracker.log_summary(self.logger)
        self.logger.info(
            f"Bulk notifications completed: {result.successful} successful, {result.failed} failed"
        )
        return result
