"""Application service: Approve Order use case."""

from __future__ import annotations

from orderflow.application.base import OrderCommandHandler
from orderflow.application.dto import OrderDTO, to_order_dto
from orderflow.domain.service.fulfillment_engine import approve_order


class ApproveOrderHandler(OrderCommandHandler):

    def handle(self, order_id: str, user: str) -> OrderDTO:
        order = approve_order(self._load(order_id), user)
        return to_order_dto(self._store(order, "approved", user))
