"""Application service: Cancel Order use case.

Unlike rejection, cancellation is allowed after approval.  Line items that
were already delivered keep their delivered status.
"""

from __future__ import annotations

from orderflow.application.base import OrderCommandHandler
from orderflow.application.dto import OrderDTO, to_order_dto
from orderflow.domain.service.fulfillment_engine import cancel_order


class CancelOrderHandler(OrderCommandHandler):

    def handle(self, order_id: str, user: str, reason: str | None = None) -> OrderDTO:
        order = cancel_order(self._load(order_id), user, reason)
        return to_order_dto(self._store(order, "cancelled", user, reason=reason))
