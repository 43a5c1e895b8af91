"""Order aggregate: a sales order and its line items.

Both the order and its line items are frozen: every change goes through
the fulfillment engine, which returns a new ``Order`` instead of mutating
the one it was given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal

from orderflow.domain.exceptions import NotFoundError, ValidationError
from orderflow.domain.model.status import OrderStatus, Priority, ProductStatus


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One audit-trail record, appended for every state-changing operation."""

    timestamp: datetime
    status: OrderStatus
    user: str
    note: str | None = None


@dataclass(frozen=True)
class OrderProduct:
    """A line item within an order.

    Invariants:
    - ``quantity`` is a positive integer and never changes
    - ``0 <= delivered <= dispatched <= allocated <= quantity``
    """

    id: str
    name: str
    sku: str
    quantity: int
    price: Decimal = Decimal("0")
    units: str = ""
    status: ProductStatus = ProductStatus.PENDING
    allocated: int = 0
    dispatched: int = 0
    delivered: int = 0
    allocated_by: str | None = None
    allocated_at: datetime | None = None
    dispatched_by: str | None = None
    dispatched_at: datetime | None = None
    delivered_by: str | None = None
    delivered_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Product ID is required")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.quantity).__name__}"
            )
        if self.quantity <= 0:
            raise ValidationError(f"Quantity of {self.name} must be positive")
        if not isinstance(self.price, Decimal):
            raise ValidationError(
                f"Price must be a Decimal, got {type(self.price).__name__}"
            )
        if not self.price.is_finite():
            raise ValidationError(f"Price of {self.name} must be a finite number")
        if self.price < 0:
            raise ValidationError(f"Price of {self.name} cannot be negative")
        if not (
            0 <= self.delivered <= self.dispatched <= self.allocated <= self.quantity
        ):
            raise ValidationError(
                f"Inconsistent quantities for {self.name}: "
                f"delivered={self.delivered}, dispatched={self.dispatched}, "
                f"allocated={self.allocated}, ordered={self.quantity}"
            )

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def remaining_to_allocate(self) -> int:
        return self.quantity - self.allocated

    @property
    def remaining_to_dispatch(self) -> int:
        return self.allocated - self.dispatched

    @property
    def remaining_to_deliver(self) -> int:
        return self.dispatched - self.delivered


@dataclass(frozen=True)
class Order:
    """Aggregate root for sales orders.

    Use ``Order.create()`` for new orders.  The plain constructor does not
    re-validate so repositories can reconstitute persisted orders as-is.
    ``version`` belongs to the repository (optimistic locking); the
    fulfillment engine carries it through unchanged.
    """

    id: str
    customer: str
    products: tuple[OrderProduct, ...]
    status: OrderStatus = OrderStatus.PENDING_APPROVAL
    status_history: tuple[StatusHistoryEntry, ...] = ()
    created_by: str = ""
    created_at: datetime = field(default_factory=utc_now)
    order_date: datetime = field(default_factory=utc_now)
    delivery_date: date | None = None
    priority: Priority = Priority.MEDIUM
    reference: str = ""
    tracking_id: str | None = None
    carrier: str | None = None
    shipping_address: str = ""
    billing_address: str = ""
    remarks: str = ""
    approved_by: str | None = None
    approved_at: datetime | None = None
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        id: str,
        customer: str,
        products: list[OrderProduct],
        created_by: str,
        *,
        reference: str = "",
        delivery_date: date | None = None,
        priority: Priority | None = None,
        shipping_address: str = "",
        billing_address: str = "",
        remarks: str = "",
        at: datetime | None = None,
    ) -> Order:
        """Create a new order awaiting approval, with every line item pending."""
        if not customer or not customer.strip():
            raise ValidationError("Customer is required")
        if not created_by or not created_by.strip():
            raise ValidationError("User is required")
        if not products:
            raise ValidationError("Order must contain at least one product")

        seen: set[str] = set()
        for product in products:
            if product.id in seen:
                raise ValidationError(f"Duplicate product ID '{product.id}' in order")
            seen.add(product.id)
            if product.status != ProductStatus.PENDING or product.allocated:
                raise ValidationError(f"New line item {product.name} must be pending")

        timestamp = at or utc_now()
        total_quantity = sum(p.quantity for p in products)
        return Order(
            id=id,
            customer=customer.strip(),
            products=tuple(products),
            status=OrderStatus.PENDING_APPROVAL,
            status_history=(
                StatusHistoryEntry(
                    timestamp=timestamp,
                    status=OrderStatus.PENDING_APPROVAL,
                    user=created_by,
                    note="Order created",
                ),
            ),
            created_by=created_by,
            created_at=timestamp,
            order_date=timestamp,
            delivery_date=delivery_date,
            priority=priority or Priority.for_quantity(total_quantity),
            reference=reference,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            remarks=remarks,
        )

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Decimal:
        return sum((p.line_total for p in self.products), Decimal("0"))

    @property
    def total_quantity(self) -> int:
        return sum(p.quantity for p in self.products)

    @property
    def is_terminal(self) -> bool:
        """True once every line item is delivered, or every one is cancelled."""
        if not self.products:
            return False
        statuses = {p.status for p in self.products}
        return statuses in ({ProductStatus.DELIVERED}, {ProductStatus.CANCELLED})

    # --- Lookups --------------------------------------------------------------

    def find_product(self, product_id: str) -> OrderProduct:
        return self.products[self.product_index(product_id)]

    def product_index(self, product_id: str) -> int:
        for index, product in enumerate(self.products):
            if product.id == product_id:
                return index
        raise NotFoundError("Product not found in order")
