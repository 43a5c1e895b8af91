"""Application service: Create Order use case."""

from __future__ import annotations

from datetime import date

import structlog

from orderflow.application.dto import OrderDTO, OrderProductSpec, to_order_dto
from orderflow.domain.model.order import Order, OrderProduct
from orderflow.domain.model.status import Priority
from orderflow.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        customer: str,
        item_specs: list[OrderProductSpec],
        created_by: str,
        *,
        reference: str = "",
        delivery_date: date | None = None,
        priority: Priority | None = None,
        shipping_address: str = "",
        remarks: str = "",
    ) -> OrderDTO:
        """Create a new order awaiting approval.

        Priority defaults to the band for the total ordered quantity.
        """
        products = [
            OrderProduct(
                id=spec.product_id,
                name=spec.name,
                sku=spec.sku,
                quantity=spec.quantity,
                price=spec.price,
                units=spec.units,
            )
            for spec in item_specs
        ]

        order = Order.create(
            id=self._order_repo.next_id(),
            customer=customer,
            products=products,
            created_by=created_by,
            reference=reference,
            delivery_date=delivery_date,
            priority=priority,
            shipping_address=shipping_address,
            remarks=remarks,
        )
        saved = self._order_repo.save(order)
        logger.info(
            "Order created",
            order_id=saved.id,
            customer=saved.customer,
            products=len(saved.products),
            user=created_by,
        )
        return to_order_dto(saved)
