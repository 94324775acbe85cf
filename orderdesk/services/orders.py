"""Order lifecycle: atomic creation, status transitions and cancellation."""

import logging
from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..db.models import LineItem, Order, OrderItem, OrderStatus, utcnow
from ..db.repository import Repository
from ..db.session import ConnectionPool
from ..errors import InvalidTransitionError, NotificationError
from ..notifications import NotificationDispatcher

# source status -> statuses it may move to
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.FULFILLED}),
    OrderStatus.PAID: frozenset({OrderStatus.FULFILLED}),
    OrderStatus.FULFILLED: frozenset(),
}

# statuses from which an order may still be cancelled (deleted)
CANCELLABLE: FrozenSet[OrderStatus] = frozenset({OrderStatus.PENDING, OrderStatus.PAID})


def can_transition(source: OrderStatus, target: OrderStatus) -> bool:
    """Whether the transition table allows ``source`` -> ``target``."""
    return target in TRANSITIONS.get(source, frozenset())


def calculate_total(items: Iterable[LineItem]) -> Decimal:
    """Sum of unit price times quantity."""
    return sum((item.amount for item in items), Decimal('0'))


def _as_line_item(item: Union[LineItem, Mapping]) -> LineItem:
    if isinstance(item, LineItem):
        return item
    return LineItem(
        product_id=item['product_id'],
        quantity=int(item['quantity']),
        unit_price=Decimal(str(item['unit_price'])),
    )


class OrderService:
    """Creates orders and moves them through their lifecycle."""

    def __init__(self, pool: ConnectionPool, notifier: NotificationDispatcher, repository: Optional[Repository] = None):
        """Initialize the service.

        Args:
            pool: Connection pool used for transactions
            notifier: Dispatcher for post-commit notifications
            repository: Helpers for single-statement reads; built from ``pool`` if omitted
        """
        self.pool = pool
        self.notifier = notifier
        self.repository = repository or Repository(pool)
        self.logger = logging.getLogger(self.__class__.__name__)

    def create_order(self, user_id: str, items: Iterable[Union[LineItem, Mapping]]) -> Order:
        """Create an order and its items in one transaction.

        The confirmation is sent after commit; if it fails the failure is
        logged and the order is returned anyway.

        Args:
            user_id: Owner of the order
            items: At least one LineItem (or mapping with product_id, quantity, unit_price)

        Returns:
            The persisted order with its items
        """
        lines = [_as_line_item(item) for item in items]
        if not lines:
            raise ValueError("An order needs at least one item")
        self.logger.info(f"Creating new order for user {user_id} with {len(lines)} items")
        total = calculate_total(lines)

        def unit_of_work(session: Session) -> Order:
            order = Order.create(user_id, total)
            session.add(order)
            session.flush()
            self.logger.debug(f"Order row inserted: {order.id}")

            for line_number, line in enumerate(lines, 1):
                order.items.append(OrderItem.from_line_item(order.id, line, line_number))
            session.flush()
            self.logger.debug(f"Order items inserted for {order.id}: {len(lines)}")
            return order

        order = self.pool.run_in_transaction(unit_of_work)
        self.logger.info(f"Order created: {order.id} (total={order.totalAmount})")

        try:
            self.notifier.send_order_confirmation(order.id, order.userId)
        except NotificationError as e:
            self.logger.error(f"Failed to send order confirmation for {order.id}: {e}")
        return order

    def get_order_by_id(self, order_id: str) -> Optional[Order]:
        """Fetch one order, or None."""
        self.logger.debug(f"Fetching order {order_id}")
        return self.repository.find_by_id(Order, order_id)

    def get_orders_by_user(self, user_id: str) -> List[Order]:
        """All orders of a user, most recent first.

        Orders sharing a ``createdAt`` timestamp come back in no defined order.
        """
        self.logger.debug(f"Fetching orders for user {user_id}")
        stmt = (
            select(Order)
            .where(Order.userId == str(user_id))
            .order_by(Order.createdAt.desc())
        )
        with self.repository.session() as session:
            return list(session.scalars(stmt))

    def update_order_status(self, order_id: str, new_status: Union[OrderStatus, str], **changes) -> Optional[Order]:
        """Move an order to ``new_status`` if the transition table allows it.

        Args:
            order_id: Order to update
            new_status: Target status (enum or its value)
            **changes: Extra column values written in the same transaction

        Returns:
            The updated order, or None if it does not exist

        Raises:
            InvalidTransitionError: If the current status may not move to ``new_status``
        """
        target = OrderStatus(new_status.upper() if isinstance(new_status, str) else new_status)
        self.logger.info(f"Updating order {order_id} status to {target.value}")

        def unit_of_work(session: Session) -> Optional[Order]:
            order = session.get(Order, order_id, with_for_update=True)
            if order is None:
                return None
            if not can_transition(order.status, target):
                raise InvalidTransitionError(order_id, order.status, target)
            now = utcnow()
            order.status = target
            order.modifiedAt = max(now, order.modifiedAt) if order.modifiedAt else now
            for column, value in changes.items():
                setattr(order, column, value)
            return order

        order = self.pool.run_in_transaction(unit_of_work)
        if order is None:
            self.logger.warning(f"Order {order_id} not found; status unchanged")
        else:
            self.logger.info(f"Order {order_id} status updated to {target.value}")
        return order

    def mark_order_paid(self, order_id: str) -> Optional[Order]:
        """Mark an order paid and record when."""
        return self.update_order_status(order_id, OrderStatus.PAID, paidAt=utcnow())

    def fulfill_order(self, order_id: str) -> Optional[Order]:
        """Mark an order fulfilled."""
        self.logger.info(f"Fulfilling order {order_id}")
        return self.update_order_status(order_id, OrderStatus.FULFILLED)

    def cancel_order(self, order_id: str) -> bool:
        """Delete an order and its items, then notify the owner.

        Returns:
            False if the order did not exist

        Raises:
            InvalidTransitionError: If the order has already been fulfilled
        """
        self.logger.info(f"Cancelling order {order_id}")

        def unit_of_work(session: Session) -> Optional[str]:
            order = session.get(Order, order_id, with_for_update=True)
            if order is None:
                return None
            if order.status not in CANCELLABLE:
                raise InvalidTransitionError(order_id, order.status, 'CANCELLED')
            user_id = order.userId
            session.expunge(order)
            session.execute(delete(OrderItem).where(OrderItem.orderId == order_id))
            session.execute(delete(Order).where(Order.id == order_id))
            return user_id

        user_id = self.pool.run_in_transaction(unit_of_work)
        if user_id is None:
            self.logger.warning(f"Order {order_id} not found; nothing to cancel")
            return False

        try:
            self.notifier.send_order_cancellation(order_id, user_id)
        except NotificationError as e:
            self.logger.debug(f"Cancellation notice for {order_id} not sent: {e}")
        return True

    def get_order_items(self, order_id: str) -> List[OrderItem]:
        """Items of an order."""
        self.logger.debug(f"Fetching items for order {order_id}")
        return self.repository.find_all(
            OrderItem, limit=None, order_by=OrderItem.lineNumber, orderId=order_id
        )

    def calculate_order_total(self, order_id: str) -> Decimal:
        """Recompute the total from the current item rows.

        This is not reconciled with ``Order.totalAmount``, which stays the
        snapshot taken at creation.
        """
        stmt = select(func.sum(OrderItem.unitPrice * OrderItem.quantity)).where(
            OrderItem.orderId == order_id
        )
        with self.repository.session() as session:
            total = session.scalar(stmt)
        return Decimal(str(total)) if total is not None else Decimal('0')
