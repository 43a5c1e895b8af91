"""Application service: Dispatch Products use case."""

from __future__ import annotations

from orderflow.application.base import OrderCommandHandler
from orderflow.application.dto import OrderDTO, to_order_dto
from orderflow.domain.service.fulfillment_engine import dispatch_products


class DispatchProductsHandler(OrderCommandHandler):

    def handle(self, order_id: str, product_id: str, quantity: int, user: str) -> OrderDTO:
        """Ship allocated units of one line item."""
        order = dispatch_products(self._load(order_id), product_id, quantity, user)
        saved = self._store(
            order, "products dispatched", user, product_id=product_id, quantity=quantity
        )
        return to_order_dto(saved)
