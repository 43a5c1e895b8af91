"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation

import click

from orderflow.application.allocate_inventory import AllocateInventoryHandler
from orderflow.application.approve_order import ApproveOrderHandler
from orderflow.application.cancel_order import CancelOrderHandler
from orderflow.application.create_order import CreateOrderHandler
from orderflow.application.deliver_products import DeliverProductsHandler
from orderflow.application.dispatch_products import DispatchProductsHandler
from orderflow.application.dto import OrderDTO, OrderProductSpec
from orderflow.application.list_orders import ListOrdersHandler
from orderflow.application.reject_order import RejectOrderHandler
from orderflow.application.show_order import ShowOrderHandler
from orderflow.domain.exceptions import DomainException
from orderflow.domain.model.status import OrderStatus, Priority
from orderflow.infrastructure.bootstrap import default_user, order_repository

_id_option = click.option(
    "--id", "order_id", required=True, help="Order ID, e.g. SO-00001."
)
_user_option = click.option(
    "--user", default=None, help="Acting user (defaults to ORDERFLOW_DEFAULT_USER)."
)


def _parse_items(raw: str) -> list[OrderProductSpec]:
    """Parse 'P1:Widget:W-01:100:2.50,P2:Gadget:G-07:40' into specs."""
    specs: list[OrderProductSpec] = []
    for entry in raw.split(","):
        parts = [part.strip() for part in entry.split(":")]
        if len(parts) not in (4, 5):
            raise click.BadParameter(
                f"Invalid item format '{entry.strip()}'. "
                f"Expected 'ID:Name:SKU:Quantity[:Price]'."
            )
        product_id, name, sku, qty_str = parts[:4]
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{name}'."
            )
        try:
            price = Decimal(parts[4]) if len(parts) == 5 else Decimal("0")
        except InvalidOperation:
            raise click.BadParameter(f"Invalid price '{parts[4]}' for product '{name}'.")
        specs.append(
            OrderProductSpec(
                product_id=product_id, name=name, sku=sku, quantity=qty, price=price
            )
        )
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (status={dto.status}, priority={dto.priority})")
    click.echo(f"Customer: {dto.customer}")
    if dto.reference:
        click.echo(f"Reference: {dto.reference}")
    click.echo(f"Created:  {dto.created_at} by {dto.created_by}")
    if dto.approved_by:
        click.echo(f"Approved by: {dto.approved_by}")
    if dto.delivery_date:
        click.echo(f"Delivery: {dto.delivery_date}")
    click.echo()

    click.echo(
        f"  {'ID':<8} {'Product':<18} {'SKU':<10} {'Status':<21} "
        f"{'Qty':>6} {'Alloc':>6} {'Disp':>6} {'Deliv':>6} {'Total':>10}"
    )
    click.echo(f"  {'-'*99}")
    for p in dto.products:
        click.echo(
            f"  {p.id:<8} {p.name:<18} {p.sku:<10} {p.status:<21} "
            f"{p.quantity:>6} {p.allocated:>6} {p.dispatched:>6} {p.delivered:>6} "
            f"{p.line_total:>10}"
        )
    click.echo(f"  {'-'*99}")
    click.echo(f"  {'Subtotal':<88} {dto.subtotal:>10}")


def _run(handler_call):
    try:
        return handler_call()
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.command("create")
@click.option("--customer", required=True, help="Customer name.")
@click.option(
    "--items", required=True, help="Items as 'ID:Name:SKU:Qty[:Price],...'."
)
@click.option("--reference", default="", help="Customer reference / PO number.")
@click.option(
    "--delivery-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Requested delivery date (YYYY-MM-DD).",
)
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority]),
    default=None,
    help="Defaults to a band based on total quantity.",
)
@click.option("--address", default="", help="Shipping address.")
@_user_option
def order_create(
    customer: str,
    items: str,
    reference: str,
    delivery_date: datetime | None,
    priority: str | None,
    address: str,
    user: str | None,
) -> None:
    """Create a new sales order awaiting approval."""
    specs = _parse_items(items)
    handler = CreateOrderHandler(order_repo=order_repository())

    dto = _run(
        lambda: handler.handle(
            customer=customer,
            item_specs=specs,
            created_by=user or default_user(),
            reference=reference,
            delivery_date=delivery_date.date() if delivery_date else None,
            priority=Priority(priority) if priority else None,
            shipping_address=address,
        )
    )
    click.echo(f"Order {dto.id} created  (status={dto.status})")
    click.echo()
    _display_order(dto)


@click.command("show")
@_id_option
def order_show(order_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())
    _display_order(_run(lambda: handler.handle(order_id)))


@click.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in OrderStatus]),
    default=None,
    help="Only show orders in this status.",
)
def order_list(status: str | None) -> None:
    """List orders, newest first."""
    handler = ListOrdersHandler(order_repo=order_repository())
    rows = handler.handle(OrderStatus(status) if status else None)

    if not rows:
        click.echo("No orders found.")
        return

    click.echo(
        f"  {'ID':<10} {'Customer':<20} {'Status':<20} {'Priority':<8} "
        f"{'Qty':>7} {'Subtotal':>12} {'Date':>11}"
    )
    click.echo(f"  {'-'*92}")
    for row in rows:
        click.echo(
            f"  {row.id:<10} {row.customer:<20} {row.status:<20} {row.priority:<8} "
            f"{row.total_quantity:>7} {row.subtotal:>12} {row.order_date:>11}"
        )


@click.command("history")
@_id_option
def order_history(order_id: str) -> None:
    """Show the audit trail of an order."""
    handler = ShowOrderHandler(order_repo=order_repository())
    dto = _run(lambda: handler.handle(order_id))

    click.echo(f"Order {dto.id} history")
    for entry in dto.history:
        click.echo(
            f"  {entry.timestamp}  {entry.status:<20} {entry.user:<12} {entry.note}"
        )


@click.command("approve")
@_id_option
@_user_option
def order_approve(order_id: str, user: str | None) -> None:
    """Approve an order awaiting approval."""
    handler = ApproveOrderHandler(order_repo=order_repository())
    _run(lambda: handler.handle(order_id, user or default_user()))
    click.echo(f"Order {order_id} approved.")


@click.command("reject")
@_id_option
@_user_option
def order_reject(order_id: str, user: str | None) -> None:
    """Reject an order awaiting approval (cancels every line item)."""
    handler = RejectOrderHandler(order_repo=order_repository())
    _run(lambda: handler.handle(order_id, user or default_user()))
    click.echo(f"Order {order_id} rejected.")


@click.command("cancel")
@_id_option
@click.option("--reason", default=None, help="Recorded in the audit trail.")
@_user_option
def order_cancel(order_id: str, reason: str | None, user: str | None) -> None:
    """Cancel all undelivered line items of an order."""
    handler = CancelOrderHandler(order_repo=order_repository())
    dto = _run(lambda: handler.handle(order_id, user or default_user(), reason))
    click.echo(f"Order {order_id} cancelled  (status={dto.status}).")


def _line_item_command(name: str, handler_cls, verb: str, help_text: str):
    @click.command(name, help=help_text)
    @_id_option
    @click.option("--product", "product_id", required=True, help="Line item product ID.")
    @click.option("--qty", "quantity", required=True, type=int, help="Units.")
    @_user_option
    def command(order_id: str, product_id: str, quantity: int, user: str | None) -> None:
        handler = handler_cls(order_repo=order_repository())
        dto = _run(
            lambda: handler.handle(order_id, product_id, quantity, user or default_user())
        )
        product = next(p for p in dto.products if p.id == product_id)
        click.echo(
            f"{verb} {quantity} units of {product.name} in order {order_id}  "
            f"(product={product.status}, order={dto.status})"
        )

    return command


order_allocate = _line_item_command(
    "allocate", AllocateInventoryHandler, "Allocated", "Allocate inventory to a line item."
)
order_dispatch = _line_item_command(
    "dispatch", DispatchProductsHandler, "Dispatched", "Dispatch allocated units of a line item."
)
order_deliver = _line_item_command(
    "deliver", DeliverProductsHandler, "Delivered", "Record delivery of dispatched units."
)
