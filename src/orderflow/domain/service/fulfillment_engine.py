"""Domain service: Order Fulfillment Engine.

The rules for moving a sales order through approval, inventory
allocation, dispatch and delivery.  Every function here is pure: it takes
an ``Order``, validates all preconditions up front, and returns a *new*
``Order`` with the line item, the derived order status and the audit
trail updated together.  Nothing is logged or persisted; a rejected call
raises and leaves the input untouched.

Line-item statuses are never accepted from the caller.  They are derived
from the counters (``allocated``, ``dispatched``, ``delivered``), and the
order status is derived from the line-item statuses.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from orderflow.domain.exceptions import InvalidStateError, ValidationError
from orderflow.domain.model.order import (
    Order,
    OrderProduct,
    StatusHistoryEntry,
    utc_now,
)
from orderflow.domain.model.status import OrderStatus, ProductStatus

# ---------------------------------------------------------------------------
# Product transition table
# ---------------------------------------------------------------------------

PRODUCT_TRANSITIONS: dict[ProductStatus, frozenset[ProductStatus]] = {
    ProductStatus.PENDING: frozenset(
        {ProductStatus.READY, ProductStatus.PARTIALLY_READY, ProductStatus.CANCELLED}
    ),
    ProductStatus.READY: frozenset(
        {ProductStatus.DISPATCHED, ProductStatus.CANCELLED}
    ),
    ProductStatus.PARTIALLY_READY: frozenset(
        {
            ProductStatus.READY,
            ProductStatus.PARTIALLY_DISPATCHED,
            ProductStatus.CANCELLED,
        }
    ),
    ProductStatus.DISPATCHED: frozenset(
        {ProductStatus.DELIVERED, ProductStatus.CANCELLED}
    ),
    ProductStatus.PARTIALLY_DISPATCHED: frozenset(
        {
            ProductStatus.DISPATCHED,
            ProductStatus.PARTIALLY_DELIVERED,
            ProductStatus.CANCELLED,
        }
    ),
    ProductStatus.PARTIALLY_DELIVERED: frozenset(
        {ProductStatus.DELIVERED, ProductStatus.CANCELLED}
    ),
    ProductStatus.DELIVERED: frozenset(),
    ProductStatus.CANCELLED: frozenset(),
}


def is_valid_transition(current: ProductStatus, new: ProductStatus) -> bool:
    """True if the transition table allows ``current`` -> ``new``."""
    return new in PRODUCT_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Order status derivation
# ---------------------------------------------------------------------------

_IN_PROGRESS = frozenset(
    {
        ProductStatus.READY,
        ProductStatus.PARTIALLY_READY,
        ProductStatus.DISPATCHED,
        ProductStatus.PARTIALLY_DISPATCHED,
        ProductStatus.DELIVERED,
        ProductStatus.PARTIALLY_DELIVERED,
    }
)

ProductsPredicate = Callable[[Sequence[OrderProduct]], bool]


def _all_are(status: ProductStatus) -> ProductsPredicate:
    return lambda products: all(p.status == status for p in products)


def _any_in_progress(products: Sequence[OrderProduct]) -> bool:
    return any(p.status in _IN_PROGRESS for p in products)


# Evaluated top to bottom, first match wins.
ORDER_STATUS_RULES: tuple[tuple[ProductsPredicate, OrderStatus], ...] = (
    (_all_are(ProductStatus.CANCELLED), OrderStatus.CANCELLED),
    (_all_are(ProductStatus.PENDING), OrderStatus.PENDING_APPROVAL),
    (_all_are(ProductStatus.READY), OrderStatus.READY),
    (_all_are(ProductStatus.DISPATCHED), OrderStatus.DISPATCHED),
    (_all_are(ProductStatus.DELIVERED), OrderStatus.DELIVERED),
    (_any_in_progress, OrderStatus.PARTIAL_FULFILLMENT),
)


def derive_order_status(products: Sequence[OrderProduct]) -> OrderStatus:
    """Compute the order-level status from its line items.

    Falls back to APPROVED when no rule matches, which with the current
    rules means a mix of only pending and cancelled line items.
    """
    if not products:
        return OrderStatus.PENDING_APPROVAL
    for matches, status in ORDER_STATUS_RULES:
        if matches(products):
            return status
    return OrderStatus.APPROVED


# ---------------------------------------------------------------------------
# Order-level operations
# ---------------------------------------------------------------------------


def approve_order(order: Order, user: str, *, at: datetime | None = None) -> Order:
    """Transition pending_approval -> approved.  Line items are untouched."""
    _require_user(user)
    if order.status != OrderStatus.PENDING_APPROVAL:
        raise InvalidStateError("Only pending orders can be approved")

    timestamp = at or utc_now()
    return _record(
        replace(order, approved_by=user, approved_at=timestamp),
        order.products,
        OrderStatus.APPROVED,
        user,
        timestamp,
        "Order approved",
    )


def reject_order(order: Order, user: str, *, at: datetime | None = None) -> Order:
    """Cancel a pending order and every one of its line items.

    Counters are left as they are; nothing is allocated before approval.
    """
    _require_user(user)
    if order.status != OrderStatus.PENDING_APPROVAL:
        raise InvalidStateError("Only pending orders can be rejected")

    products = tuple(
        replace(p, status=ProductStatus.CANCELLED) for p in order.products
    )
    return _record(
        order, products, OrderStatus.CANCELLED, user, at or utc_now(), "Order rejected"
    )


def cancel_order(
    order: Order,
    user: str,
    reason: str | None = None,
    *,
    at: datetime | None = None,
) -> Order:
    """Cancel every line item that has not reached a terminal status.

    Delivered line items stay delivered, so an order cancelled after a
    partial delivery keeps its delivery record.
    """
    _require_user(user)
    if order.status in (OrderStatus.CANCELLED, OrderStatus.DELIVERED):
        raise InvalidStateError(f"Order is already {order.status.value}")

    open_ids = {
        p.id for p in order.products if is_valid_transition(p.status, ProductStatus.CANCELLED)
    }
    if not open_ids:
        raise InvalidStateError("Order has no open products to cancel")

    products = tuple(
        replace(p, status=ProductStatus.CANCELLED) if p.id in open_ids else p
        for p in order.products
    )
    note = f"Order cancelled: {reason}" if reason else "Order cancelled"
    return _record(
        order, products, derive_order_status(products), user, at or utc_now(), note
    )


# ---------------------------------------------------------------------------
# Line-item operations
# ---------------------------------------------------------------------------


def _allocate_line(
    product: OrderProduct, count: int, status: ProductStatus, user: str, at: datetime
) -> OrderProduct:
    return replace(
        product, status=status, allocated=count, allocated_by=user, allocated_at=at
    )


def _dispatch_line(
    product: OrderProduct, count: int, status: ProductStatus, user: str, at: datetime
) -> OrderProduct:
    return replace(
        product, status=status, dispatched=count, dispatched_by=user, dispatched_at=at
    )


def _deliver_line(
    product: OrderProduct, count: int, status: ProductStatus, user: str, at: datetime
) -> OrderProduct:
    return replace(
        product, status=status, delivered=count, delivered_by=user, delivered_at=at
    )


LineUpdate = Callable[[OrderProduct, int, ProductStatus, str, datetime], OrderProduct]


@dataclass(frozen=True)
class _Stage:
    """How one step of the allocate -> dispatch -> deliver pipeline behaves."""

    current: Callable[[OrderProduct], int]
    ceiling: Callable[[OrderProduct], int]
    apply: LineUpdate  # sets the counter, status and the stage's *_by/*_at stamps
    allowed_from: frozenset[ProductStatus]
    complete: ProductStatus
    partial: ProductStatus
    label: str
    verb: str
    state_error: str
    ceiling_error: str


_ALLOCATION = _Stage(
    current=lambda p: p.allocated,
    ceiling=lambda p: p.quantity,
    apply=_allocate_line,
    allowed_from=frozenset({ProductStatus.PENDING, ProductStatus.PARTIALLY_READY}),
    complete=ProductStatus.READY,
    partial=ProductStatus.PARTIALLY_READY,
    label="Allocation",
    verb="Allocated",
    state_error=(
        "Product must be in pending or partially ready status to allocate inventory"
    ),
    ceiling_error="Cannot allocate more than ordered quantity",
)

_DISPATCH = _Stage(
    current=lambda p: p.dispatched,
    ceiling=lambda p: p.allocated,
    apply=_dispatch_line,
    allowed_from=frozenset(
        {
            ProductStatus.READY,
            ProductStatus.PARTIALLY_READY,
            ProductStatus.PARTIALLY_DISPATCHED,
        }
    ),
    complete=ProductStatus.DISPATCHED,
    partial=ProductStatus.PARTIALLY_DISPATCHED,
    label="Dispatch",
    verb="Dispatched",
    state_error="Product must be ready or partially ready to dispatch",
    ceiling_error="Cannot dispatch more than allocated quantity",
)

_DELIVERY = _Stage(
    current=lambda p: p.delivered,
    ceiling=lambda p: p.dispatched,
    apply=_deliver_line,
    allowed_from=frozenset(
        {
            ProductStatus.DISPATCHED,
            ProductStatus.PARTIALLY_DISPATCHED,
            ProductStatus.PARTIALLY_DELIVERED,
        }
    ),
    complete=ProductStatus.DELIVERED,
    partial=ProductStatus.PARTIALLY_DELIVERED,
    label="Delivery",
    verb="Delivered",
    state_error="Product must be dispatched or partially dispatched to deliver",
    ceiling_error="Cannot deliver more than dispatched quantity",
)


def allocate_inventory(
    order: Order,
    product_id: str,
    quantity: int,
    user: str,
    *,
    at: datetime | None = None,
) -> Order:
    """Reserve ``quantity`` more units of a line item against stock."""
    return _advance(order, product_id, quantity, user, at, _ALLOCATION)


def dispatch_products(
    order: Order,
    product_id: str,
    quantity: int,
    user: str,
    *,
    at: datetime | None = None,
) -> Order:
    """Ship ``quantity`` more of the allocated units of a line item."""
    return _advance(order, product_id, quantity, user, at, _DISPATCH)


def deliver_products(
    order: Order,
    product_id: str,
    quantity: int,
    user: str,
    *,
    at: datetime | None = None,
) -> Order:
    """Confirm receipt of ``quantity`` more of the dispatched units."""
    return _advance(order, product_id, quantity, user, at, _DELIVERY)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _advance(
    order: Order,
    product_id: str,
    quantity: int,
    user: str,
    at: datetime | None,
    stage: _Stage,
) -> Order:
    _require_user(user)
    index = order.product_index(product_id)
    product = order.products[index]

    if product.status not in stage.allowed_from:
        raise InvalidStateError(stage.state_error)
    _require_positive(quantity, stage.label)

    new_count = stage.current(product) + quantity
    ceiling = stage.ceiling(product)
    if new_count > ceiling:
        raise ValidationError(stage.ceiling_error)

    timestamp = at or utc_now()
    status = stage.complete if new_count == ceiling else stage.partial
    updated = stage.apply(product, new_count, status, user, timestamp)
    products = order.products[:index] + (updated,) + order.products[index + 1 :]
    return _record(
        order,
        products,
        derive_order_status(products),
        user,
        timestamp,
        f"{stage.verb} {quantity} units of {product.name} ({product.sku})",
    )


def _record(
    order: Order,
    products: tuple[OrderProduct, ...],
    status: OrderStatus,
    user: str,
    timestamp: datetime,
    note: str,
) -> Order:
    """Build the new order value with exactly one history entry appended."""
    entry = StatusHistoryEntry(timestamp=timestamp, status=status, user=user, note=note)
    return replace(
        order,
        products=products,
        status=status,
        status_history=order.status_history + (entry,),
    )


def _require_user(user: str) -> None:
    if not isinstance(user, str) or not user.strip():
        raise ValidationError("User is required")


def _require_positive(quantity: int, label: str) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"{label} quantity must be an integer")
    if quantity <= 0:
        raise ValidationError(f"{label} quantity must be positive")
