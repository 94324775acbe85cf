"""Order lifecycle commands."""

from decimal import Decimal, InvalidOperation
from typing import List, Sequence

import click

from ..cli.base import BaseCommand, command_error_handler
from ..cli.config import Config
from ..db.models import LineItem, Order, OrderStatus


def parse_item(value: str) -> LineItem:
    """Parse ``PRODUCT:QTY:PRICE`` into a LineItem."""
    parts = value.split(':')
    if len(parts) != 3 or not parts[0]:
        raise click.BadParameter(f"expected PRODUCT:QTY:PRICE, got {value!r}")
    product_id, quantity, price = parts
    try:
        quantity = int(quantity)
        price = Decimal(price)
    except (ValueError, InvalidOperation):
        raise click.BadParameter(f"invalid quantity or price in {value!r}")
    if quantity <= 0:
        raise click.BadParameter(f"quantity must be positive in {value!r}")
    if price < 0:
        raise click.BadParameter(f"price must not be negative in {value!r}")
    return LineItem(product_id=product_id, quantity=quantity, unit_price=price)


def format_order(order: Order) -> str:
    line = f"{order.id}  {order.status.value:<9}  {order.totalAmount:>10}  user={order.userId}  created={order.createdAt:%Y-%m-%d %H:%M:%S}"
    if order.paidAt:
        line += f"  paid={order.paidAt:%Y-%m-%d %H:%M:%S}"
    return line


class CreateOrderCommand(BaseCommand):
    """Create an order with its items."""

    def __init__(self, config: Config, user_id: str, items: Sequence[LineItem]):
        super().__init__(config)
        self.user_id = user_id
        self.items = list(items)

    @command_error_handler
    def execute(self) -> Order:
        order = self.order_service.create_order(self.user_id, self.items)
        click.secho(f"Created order {order.id} (total {order.totalAmount})", fg='green')
        return order


class ShowOrderCommand(BaseCommand):
    """Show one order."""

    def __init__(self, config: Config, order_id: str, show_items: bool = False):
        super().__init__(config)
        self.order_id = order_id
        self.show_items = show_items

    @command_error_handler
    def execute(self) -> None:
        service = self.order_service
        order = service.get_order_by_id(self.order_id)
        if order is None:
            click.secho(f"Order {self.order_id} not found", fg='yellow')
            return
        click.echo(format_order(order))
        if self.show_items:
            for item in service.get_order_items(self.order_id):
                click.echo(f"  {item.productId}  x{item.quantity}  @ {item.unitPrice}")
            click.echo(f"  live total: {service.calculate_order_total(self.order_id)}")


class ListOrdersCommand(BaseCommand):
    """List a user's orders, newest first."""

    def __init__(self, config: Config, user_id: str):
        super().__init__(config)
        self.user_id = user_id

    @command_error_handler
    def execute(self) -> List[Order]:
        orders = self.order_service.get_orders_by_user(self.user_id)
        if not orders:
            click.echo(f"No orders found for user {self.user_id}")
        for order in orders:
            click.echo(format_order(order))
        return orders


class UpdateStatusCommand(BaseCommand):
    """Move an order to a new status."""

    def __init__(self, config: Config, order_id: str, status: OrderStatus):
        super().__init__(config)
        self.order_id = order_id
        self.status = status

    @command_error_handler
    def execute(self) -> None:
        service = self.order_service
        if self.status is OrderStatus.PAID:
            order = service.mark_order_paid(self.order_id)
        elif self.status is OrderStatus.FULFILLED:
            order = service.fulfill_order(self.order_id)
        else:
            order = service.update_order_status(self.order_id, self.status)
        if order is None:
            click.secho(f"Order {self.order_id} not found", fg='yellow')
            return
        click.secho(f"Order {order.id} is now {order.status.value}", fg='green')


class CancelOrderCommand(BaseCommand):
    """Cancel (delete) an order."""

    def __init__(self, config: Config, order_id: str):
        super().__init__(config)
        self.order_id = order_id

    @command_error_handler
    def execute(self) -> None:
        if self.order_service.cancel_order(self.order_id):
            click.secho(f"Order {self.order_id} cancelled", fg='green')
        else:
            click.secho(f"Order {self.order_id} not found", fg='yellow')


@click.group()
def orders():
    """Create, inspect and transition orders."""
    pass

@orders.command('create')
@click.argument('user_id')
@click.option('--item', 'items', multiple=True, required=True, help='Line item as PRODUCT:QTY:PRICE (repeatable)')
@click.pass_context
def create(ctx, user_id: str, items):
    """Create an order for USER_ID."""
    lines = [parse_item(spec) for spec in items]
    CreateOrderCommand(ctx.obj['config'], user_id, lines).execute()

@orders.command('show')
@click.argument('order_id')
@click.option('--items', 'show_items', is_flag=True, help='Also list line items')
@click.pass_context
def show(ctx, order_id: str, show_items: bool):
    """Show ORDER_ID."""
    ShowOrderCommand(ctx.obj['config'], order_id, show_items).execute()

@orders.command('list')
@click.argument('user_id')
@click.pass_context
def list_orders(ctx, user_id: str):
    """List orders of USER_ID, newest first."""
    ListOrdersCommand(ctx.obj['config'], user_id).execute()

@orders.command('set-status')
@click.argument('order_id')
@click.argument('status', type=click.Choice([s.value for s in OrderStatus], case_sensitive=False))
@click.pass_context
def set_status(ctx, order_id: str, status: str):
    """Move ORDER_ID to STATUS."""
    UpdateStatusCommand(ctx.obj['config'], order_id, OrderStatus(status.upper())).execute()

@orders.command('pay')
@click.argument('order_id')
@click.pass_context
def pay(ctx, order_id: str):
    """Mark ORDER_ID as paid."""
    UpdateStatusCommand(ctx.obj['config'], order_id, OrderStatus.PAID).execute()

@orders.command('fulfill')
@click.argument('order_id')
@click.pass_context
def fulfill(ctx, order_id: str):
    """Mark ORDER_ID as fulfilled."""
    UpdateStatusCommand(ctx.obj['config'], order_id, OrderStatus.FULFILLED).execute()

@orders.command('cancel')
@click.argument('order_id')
@click.pass_context
def cancel(ctx, order_id: str):
    """Cancel ORDER_ID, deleting it and its items."""
    CancelOrderCommand(ctx.obj['config'], order_id).execute()
