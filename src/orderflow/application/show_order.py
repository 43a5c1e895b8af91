"""Application service: Show Order use case (query)."""

from __future__ import annotations

from orderflow.application.base import load_order
from orderflow.application.dto import OrderDTO, to_order_dto
from orderflow.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str) -> OrderDTO:
        return to_order_dto(load_order(self._order_repo, order_id))
