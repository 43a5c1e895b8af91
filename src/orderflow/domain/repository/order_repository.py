"""Abstract repository for the Order aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Implementations must guard ``save`` with the order's
``version`` so two writers working from the same snapshot cannot silently
overwrite each other.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.model.order import Order

ORDER_ID_PREFIX = "SO-"


def format_order_id(number: int) -> str:
    return f"{ORDER_ID_PREFIX}{number:05d}"


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every stored order."""

    @abstractmethod
    def save(self, order: Order) -> Order:
        """Persist a new or updated order and return it with its new version.

        Raises ConcurrencyError if the stored version is not ``order.version``.
        """
