"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from orderflow.domain.model.order import Order

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class OrderProductSpec:
    """Input: one line item requested on a new order."""

    product_id: str
    name: str
    sku: str
    quantity: int
    price: Decimal = Decimal("0")
    units: str = ""


@dataclass(frozen=True)
class OrderProductDTO:
    """Output: a single line item with its fulfillment progress."""

    id: str
    name: str
    sku: str
    status: str
    quantity: int
    allocated: int
    dispatched: int
    delivered: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class StatusHistoryDTO:
    timestamp: str
    status: str
    user: str
    note: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    customer: str
    reference: str
    status: str
    priority: str
    products: list[OrderProductDTO]
    history: list[StatusHistoryDTO]
    subtotal: str
    created_by: str
    created_at: str
    delivery_date: str
    approved_by: str
    version: int


@dataclass(frozen=True)
class OrderSummaryDTO:
    """Output: one row of an order listing."""

    id: str
    customer: str
    status: str
    priority: str
    total_quantity: int
    subtotal: str
    order_date: str


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        customer=order.customer,
        reference=order.reference,
        status=order.status.value,
        priority=order.priority.value,
        products=[
            OrderProductDTO(
                id=p.id,
                name=p.name,
                sku=p.sku,
                status=p.status.value,
                quantity=p.quantity,
                allocated=p.allocated,
                dispatched=p.dispatched,
                delivered=p.delivered,
                unit_price=_money(p.price),
                line_total=_money(p.line_total),
            )
            for p in order.products
        ],
        history=[
            StatusHistoryDTO(
                timestamp=entry.timestamp.strftime(TIMESTAMP_FORMAT),
                status=entry.status.value,
                user=entry.user,
                note=entry.note or "",
            )
            for entry in order.status_history
        ],
        subtotal=_money(order.subtotal),
        created_by=order.created_by,
        created_at=order.created_at.strftime(TIMESTAMP_FORMAT),
        delivery_date=order.delivery_date.isoformat() if order.delivery_date else "",
        approved_by=order.approved_by or "",
        version=order.version,
    )


def to_summary_dto(order: Order) -> OrderSummaryDTO:
    return OrderSummaryDTO(
        id=order.id,
        customer=order.customer,
        status=order.status.value,
        priority=order.priority.value,
        total_quantity=order.total_quantity,
        subtotal=_money(order.subtotal),
        order_date=order.order_date.strftime("%Y-%m-%d"),
    )
