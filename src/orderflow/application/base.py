"""Shared plumbing for use cases that change an existing order."""

from __future__ import annotations

import structlog

from orderflow.domain.exceptions import NotFoundError
from orderflow.domain.model.order import Order
from orderflow.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


def load_order(order_repo: OrderRepository, order_id: str) -> Order:
    order = order_repo.get_by_id(order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


class OrderCommandHandler:
    """Load an order, apply one engine operation, save the result.

    The repository rejects the save if the order changed in between, so
    concurrent commands on the same order cannot lose each other's updates.
    """

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def _load(self, order_id: str) -> Order:
        return load_order(self._order_repo, order_id)

    def _store(self, order: Order, action: str, user: str, **context) -> Order:
        saved = self._order_repo.save(order)
        logger.info(
            "Order updated",
            action=action,
            order_id=saved.id,
            status=saved.status.value,
            user=user,
            version=saved.version,
            **context,
        )
        return saved
