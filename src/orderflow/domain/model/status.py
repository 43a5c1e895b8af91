"""Closed status vocabularies for orders and their line items."""

from __future__ import annotations

from enum import Enum


class ProductStatus(Enum):
    PENDING = "pending"
    READY = "ready"
    PARTIALLY_READY = "partially_ready"
    DISPATCHED = "dispatched"
    PARTIALLY_DISPATCHED = "partially_dispatched"
    DELIVERED = "delivered"
    PARTIALLY_DELIVERED = "partially_delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ProductStatus.DELIVERED, ProductStatus.CANCELLED)


class OrderStatus(Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    READY = "ready"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    PARTIAL_FULFILLMENT = "partial_fulfillment"
    CANCELLED = "cancelled"


# Upper bounds (inclusive) of total ordered quantity per priority band.
HIGH_PRIORITY_MAX_QUANTITY = 1000
MEDIUM_PRIORITY_MAX_QUANTITY = 10000


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @staticmethod
    def for_quantity(total_quantity: int) -> Priority:
        """Default priority for an order: small orders are turned around first."""
        if total_quantity <= HIGH_PRIORITY_MAX_QUANTITY:
            return Priority.HIGH
        if total_quantity <= MEDIUM_PRIORITY_MAX_QUANTITY:
            return Priority.MEDIUM
        return Priority.LOW
