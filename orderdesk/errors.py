"""Custom exceptions for orderdesk."""

from typing import Optional


class OrderDeskError(Exception):
    """Base exception for all orderdesk errors.

    Every subclass exposes a stable ``kind`` string for callers and keeps the
    underlying failure (if any) on ``original``.
    """

    kind = 'orderdesk_error'

    def __init__(self, message: str, original: Optional[BaseException] = None):
        self.original = original
        if original is not None:
            message = f"{message}: {original}"
        super().__init__(message)


class TransactionError(OrderDeskError):
    """Raised when a unit of work fails and its transaction is rolled back."""

    kind = 'transaction_failure'

    def __init__(self, original: BaseException):
        super().__init__("Transaction rolled back", original)


class PoolExhaustedError(OrderDeskError):
    """Raised when no connection could be acquired within the pool timeout."""

    kind = 'pool_exhausted'

    def __init__(self, timeout: float, original: Optional[BaseException] = None):
        self.timeout = timeout
        super().__init__(f"No connection available after {timeout}s", original)


class InvalidTransitionError(OrderDeskError):
    """Raised when an order status change is not in the transition table."""

    kind = 'invalid_transition'

    def __init__(self, order_id: str, source, target):
        self.order_id = order_id
        self.source = source
        self.target = target
        super().__init__(
            f"Order {order_id} cannot move from {_label(source)} to {_label(target)}"
        )


class DeliveryError(OrderDeskError):
    """Raised when the transport fails to deliver a message."""

    kind = 'delivery_failure'

    def __init__(self, recipient: str, original: BaseException):
        self.recipient = recipient
        super().__init__(f"Delivery to {recipient} failed", original)


class AddressLookupError(OrderDeskError):
    """Raised when a user's delivery address cannot be resolved."""

    kind = 'address_lookup_failure'

    def __init__(self, user_id: str, original: Optional[BaseException] = None):
        self.user_id = user_id
        super().__init__(f"Could not resolve address for user {user_id}", original)


class NotificationError(OrderDeskError):
    """Raised when an order notification could not be sent."""

    kind = 'notification_failure'

    def __init__(self, template: str, order_id: str, user_id: str, original: BaseException):
        self.template = template
        self.order_id = order_id
        self.user_id = user_id
        super().__init__(f"Failed to send {template} for order {order_id}", original)


def _label(status) -> str:
    return getattr(status, 'value', status)
