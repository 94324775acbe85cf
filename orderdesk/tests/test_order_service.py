"""Tests for the order lifecycle service."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from ..db.models import LineItem, Order, OrderStatus
from ..errors import InvalidTransitionError, TransactionError
from ..notifications import NotificationDispatcher
from ..services import OrderService, can_transition, calculate_total
from .conftest import FakeDirectory, RecordingTransport, count_rows


def test_create_order_computes_total(service, sample_items):
    order = service.create_order('u-1', sample_items)

    assert order.totalAmount == Decimal('35')
    assert order.status is OrderStatus.PENDING
    assert order.userId == 'u-1'
    assert len(order.items) == 2


def test_create_order_assigns_uuid_keys(service, sample_items):
    order = service.create_order('u-1', sample_items)

    ids = [order.id] + [item.id for item in order.items]
    assert all(str(uuid.UUID(value)) == value for value in ids)
    assert len(set(ids)) == len(ids)


def test_create_order_persists_order_and_items(service, repository, sample_items):
    order = service.create_order('u-1', sample_items)

    stored = service.get_order_by_id(order.id)
    assert stored.totalAmount == Decimal('35')
    items = service.get_order_items(order.id)
    assert sorted((i.productId, i.quantity, i.unitPrice) for i in items) == [
        ('gadget', 3, Decimal('5')),
        ('widget', 2, Decimal('10')),
    ]
    assert count_rows(repository, 'OrderItem') == 2


def test_create_order_accepts_mappings(service):
    order = service.create_order('u-1', [{'product_id': 'p-1', 'quantity': 4, 'unit_price': '2.25'}])
    assert order.totalAmount == Decimal('9.00')


def test_items_keep_submission_order(service):
    lines = [LineItem(product_id=name, quantity=1, unit_price=Decimal('1')) for name in ('c', 'a', 'b')]

    order = service.create_order('u-1', lines)

    assert [(i.lineNumber, i.productId) for i in order.items] == [(1, 'c'), (2, 'a'), (3, 'b')]
    items = service.get_order_items(order.id)
    assert [(i.lineNumber, i.productId) for i in items] == [(1, 'c'), (2, 'a'), (3, 'b')]
    assert [i.productId for i in service.get_order_by_id(order.id).items] == ['c', 'a', 'b']


def test_create_order_requires_items(service):
    with pytest.raises(ValueError):
        service.create_order('u-1', [])


def test_create_order_sends_confirmation(service, transport, sample_items):
    order = service.create_order('u-1', sample_items)

    assert transport.sent == [
        ('u-1@example.com', 'Order Confirmation', f'Your order #{order.id} has been confirmed.')
    ]


def test_failed_item_insert_rolls_back_everything(service, repository, transport):
    """An item row rejected after the order row was written leaves nothing behind."""
    items = [
        LineItem(product_id='ok', quantity=1, unit_price=Decimal('10')),
        LineItem(product_id='bad', quantity=0, unit_price=Decimal('5')),
    ]

    with pytest.raises(TransactionError):
        service.create_order('u-1', items)

    assert count_rows(repository, 'Order') == 0
    assert count_rows(repository, 'OrderItem') == 0
    assert transport.sent == []


@pytest.mark.parametrize('directory, transport', [
    (FakeDirectory(failing=['u-1']), RecordingTransport()),
    (FakeDirectory(), RecordingTransport(fail=True)),
])
def test_notification_failure_does_not_fail_create(pool, directory, transport, sample_items):
    service = OrderService(pool, NotificationDispatcher(directory, transport))

    order = service.create_order('u-1', sample_items)

    assert order.totalAmount == Decimal('35')
    assert service.get_order_by_id(order.id).to_dict() == order.to_dict()


def test_get_order_by_id_is_idempotent(service, sample_items):
    order = service.create_order('u-1', sample_items)

    first = service.get_order_by_id(order.id)
    second = service.get_order_by_id(order.id)
    assert first.to_dict() == second.to_dict()


def test_get_order_by_id_missing(service):
    assert service.get_order_by_id('missing') is None


def test_get_orders_by_user_newest_first(service, repository, sample_items):
    older = service.create_order('u-1', sample_items)
    newer = service.create_order('u-1', sample_items)
    service.create_order('u-2', sample_items)
    repository.update(Order, older.id, {'createdAt': newer.createdAt - timedelta(hours=1)})

    orders = service.get_orders_by_user('u-1')
    assert [o.id for o in orders] == [newer.id, older.id]
    assert service.get_orders_by_user('nobody') == []


def test_mark_order_paid(service, sample_items):
    order = service.create_order('u-1', sample_items)

    paid = service.mark_order_paid(order.id)

    assert paid.status is OrderStatus.PAID
    assert paid.paidAt is not None
    assert paid.modifiedAt >= order.modifiedAt
    assert service.get_order_by_id(order.id).status is OrderStatus.PAID


def test_fulfill_from_pending_and_paid(service, sample_items):
    direct = service.create_order('u-1', sample_items)
    assert service.fulfill_order(direct.id).status is OrderStatus.FULFILLED

    via_paid = service.create_order('u-1', sample_items)
    service.mark_order_paid(via_paid.id)
    assert service.fulfill_order(via_paid.id).status is OrderStatus.FULFILLED


@pytest.mark.parametrize('path, target', [
    ([OrderStatus.PAID], OrderStatus.PENDING),
    ([OrderStatus.PAID], OrderStatus.PAID),
    ([OrderStatus.FULFILLED], OrderStatus.PAID),
    ([], OrderStatus.PENDING),
])
def test_invalid_transitions_are_rejected(service, sample_items, path, target):
    order = service.create_order('u-1', sample_items)
    for status in path:
        service.update_order_status(order.id, status)
    before = service.get_order_by_id(order.id)

    with pytest.raises(InvalidTransitionError) as exc_info:
        service.update_order_status(order.id, target)

    assert exc_info.value.kind == 'invalid_transition'
    assert exc_info.value.target is target
    after = service.get_order_by_id(order.id)
    assert after.to_dict() == before.to_dict()


def test_update_order_status_accepts_strings(service, sample_items):
    order = service.create_order('u-1', sample_items)
    assert service.update_order_status(order.id, 'paid').status is OrderStatus.PAID


def test_update_missing_order_returns_none(service):
    assert service.update_order_status('missing', OrderStatus.PAID) is None
    assert service.mark_order_paid('missing') is None


def test_cancel_order_deletes_order_and_items(service, repository, transport, sample_items):
    order = service.create_order('u-1', sample_items)
    transport.sent.clear()

    assert service.cancel_order(order.id) is True

    assert service.get_order_by_id(order.id) is None
    assert service.get_order_items(order.id) == []
    assert count_rows(repository, 'OrderItem', '"orderId" = :id', {'id': order.id}) == 0
    assert transport.sent == [
        ('u-1@example.com', 'Order Cancellation', f'Your order #{order.id} has been cancelled.')
    ]


def test_cancel_missing_order(service, transport):
    assert service.cancel_order('missing') is False
    assert transport.sent == []


def test_cancel_swallows_notification_failure(pool, sample_items):
    service = OrderService(pool, NotificationDispatcher(FakeDirectory(), RecordingTransport(fail=True)))
    order = service.create_order('u-1', sample_items)

    assert service.cancel_order(order.id) is True
    assert service.get_order_by_id(order.id) is None


def test_cancel_fulfilled_order_is_rejected(service, sample_items):
    order = service.create_order('u-1', sample_items)
    service.fulfill_order(order.id)

    with pytest.raises(InvalidTransitionError):
        service.cancel_order(order.id)

    assert service.get_order_by_id(order.id) is not None
    assert len(service.get_order_items(order.id)) == 2


def test_calculate_order_total(service, sample_items):
    order = service.create_order('u-1', sample_items)

    assert service.calculate_order_total(order.id) == Decimal('35')
    assert service.calculate_order_total('missing') == Decimal('0')


def test_live_total_is_not_reconciled_with_snapshot(service, repository, sample_items):
    order = service.create_order('u-1', sample_items)
    repository.query('UPDATE "OrderItem" SET quantity = 1 WHERE "orderId" = :id', {'id': order.id})

    assert service.calculate_order_total(order.id) == Decimal('15')
    assert service.get_order_by_id(order.id).totalAmount == Decimal('35')


def test_transition_table():
    assert can_transition(OrderStatus.PENDING, OrderStatus.PAID)
    assert can_transition(OrderStatus.PENDING, OrderStatus.FULFILLED)
    assert can_transition(OrderStatus.PAID, OrderStatus.FULFILLED)
    assert not can_transition(OrderStatus.PAID, OrderStatus.PENDING)
    assert not can_transition(OrderStatus.FULFILLED, OrderStatus.PENDING)


def test_calculate_total():
    assert calculate_total([
        LineItem('a', 2, Decimal('10')),
        LineItem('b', 3, Decimal('5')),
    ]) == Decimal('35')
