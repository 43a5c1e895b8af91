"""Application service: Reject Order use case.

Only orders still awaiting approval can be rejected; every line item is
cancelled along with the order.
"""

from __future__ import annotations

from orderflow.application.base import OrderCommandHandler
from orderflow.application.dto import OrderDTO, to_order_dto
from orderflow.domain.service.fulfillment_engine import reject_order


class RejectOrderHandler(OrderCommandHandler):

    def handle(self, order_id: str, user: str) -> OrderDTO:
        order = reject_order(self._load(order_id), user)
        return to_order_dto(self._store(order, "rejected", user))
