"""Application service: Deliver Products use case."""

from __future__ import annotations

from orderflow.application.base import OrderCommandHandler
from orderflow.application.dto import OrderDTO, to_order_dto
from orderflow.domain.service.fulfillment_engine import deliver_products


class DeliverProductsHandler(OrderCommandHandler):

    def handle(self, order_id: str, product_id: str, quantity: int, user: str) -> OrderDTO:
        """Record customer receipt of dispatched units of one line item."""
        order = deliver_products(self._load(order_id), product_id, quantity, user)
        saved = self._store(
            order, "products delivered", user, product_id=product_id, quantity=quantity
        )
        return to_order_dto(saved)
