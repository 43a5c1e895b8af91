"""Application service: Allocate Inventory use case."""

from __future__ import annotations

from orderflow.application.base import OrderCommandHandler
from orderflow.application.dto import OrderDTO, to_order_dto
from orderflow.domain.service.fulfillment_engine import allocate_inventory


class AllocateInventoryHandler(OrderCommandHandler):

    def handle(self, order_id: str, product_id: str, quantity: int, user: str) -> OrderDTO:
        """Reserve stock for one line item, fully or partially."""
        order = allocate_inventory(self._load(order_id), product_id, quantity, user)
        saved = self._store(
            order, "inventory allocated", user, product_id=product_id, quantity=quantity
        )
        return to_order_dto(saved)
