"""Application service: List Orders use case (query)."""

from __future__ import annotations

from orderflow.application.dto import OrderSummaryDTO, to_summary_dto
from orderflow.domain.model.status import OrderStatus
from orderflow.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, status: OrderStatus | None = None) -> list[OrderSummaryDTO]:
        """Return orders newest first, optionally only those in ``status``."""
        orders = self._order_repo.list_all()
        if status is not None:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: o.order_date, reverse=True)
        return [to_summary_dto(o) for o in orders]
