"""JSON-file-backed implementation of OrderRepository.

The version check and the write happen under a lock shared by every
repository on the same file, and the file is replaced atomically, so
writers within one process are serialized per file.  The lock is not
visible to other processes: run one writer process per data file.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from orderflow.domain.exceptions import ConcurrencyError
from orderflow.domain.model.order import Order, OrderProduct, StatusHistoryEntry
from orderflow.domain.model.status import OrderStatus, Priority, ProductStatus
from orderflow.domain.repository.order_repository import (
    ORDER_ID_PREFIX,
    OrderRepository,
    format_order_id,
)

_file_locks: dict[Path, threading.Lock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _registry_lock:
        return _file_locks.setdefault(path.resolve(), threading.Lock())


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()
        self._lock = _lock_for(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> str:
        numbers = [
            int(raw["id"][len(ORDER_ID_PREFIX):])
            for raw in self._load_raw()
            if raw["id"].startswith(ORDER_ID_PREFIX)
        ]
        return format_order_id(max(numbers, default=0) + 1)

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, order: Order) -> Order:
        saved = replace(order, version=order.version + 1)

        with self._lock:
            orders = self._load_raw()

            # Upsert guarded by the version the caller loaded
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    if raw["version"] != order.version:
                        raise ConcurrencyError(
                            f"Order {order.id} was modified by another user "
                            f"(expected version {order.version}, found {raw['version']})"
                        )
                    orders[i] = self._to_raw(saved)
                    break
            else:
                if order.version != 0:
                    raise ConcurrencyError(f"Order {order.id} no longer exists")
                orders.append(self._to_raw(saved))

            self._persist_raw(orders)
        return saved

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "version": order.version,
            "customer": order.customer,
            "reference": order.reference,
            "status": order.status.value,
            "priority": order.priority.value,
            "order_date": order.order_date.isoformat(),
            "delivery_date": _iso(order.delivery_date),
            "tracking_id": order.tracking_id,
            "carrier": order.carrier,
            "shipping_address": order.shipping_address,
            "billing_address": order.billing_address,
            "remarks": order.remarks,
            "created_by": order.created_by,
            "created_at": order.created_at.isoformat(),
            "approved_by": order.approved_by,
            "approved_at": _iso(order.approved_at),
            "products": [
                {
                    "id": p.id,
                    "name": p.name,
                    "sku": p.sku,
                    "units": p.units,
                    "quantity": p.quantity,
                    "price": str(p.price),
                    "status": p.status.value,
                    "allocated": p.allocated,
                    "dispatched": p.dispatched,
                    "delivered": p.delivered,
                    "allocated_by": p.allocated_by,
                    "allocated_at": _iso(p.allocated_at),
                    "dispatched_by": p.dispatched_by,
                    "dispatched_at": _iso(p.dispatched_at),
                    "delivered_by": p.delivered_by,
                    "delivered_at": _iso(p.delivered_at),
                }
                for p in order.products
            ],
            "status_history": [
                {
                    "timestamp": entry.timestamp.isoformat(),
                    "status": entry.status.value,
                    "user": entry.user,
                    "note": entry.note,
                }
                for entry in order.status_history
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        products = tuple(
            OrderProduct(
                id=p["id"],
                name=p["name"],
                sku=p["sku"],
                units=p.get("units", ""),
                quantity=p["quantity"],
                price=Decimal(p["price"]),
                status=ProductStatus(p["status"]),
                allocated=p["allocated"],
                dispatched=p["dispatched"],
                delivered=p["delivered"],
                allocated_by=p.get("allocated_by"),
                allocated_at=_parse_datetime(p.get("allocated_at")),
                dispatched_by=p.get("dispatched_by"),
                dispatched_at=_parse_datetime(p.get("dispatched_at")),
                delivered_by=p.get("delivered_by"),
                delivered_at=_parse_datetime(p.get("delivered_at")),
            )
            for p in raw["products"]
        )
        history = tuple(
            StatusHistoryEntry(
                timestamp=datetime.fromisoformat(h["timestamp"]),
                status=OrderStatus(h["status"]),
                user=h["user"],
                note=h.get("note"),
            )
            for h in raw["status_history"]
        )
        delivery_date = raw.get("delivery_date")
        return Order(
            id=raw["id"],
            version=raw["version"],
            customer=raw["customer"],
            reference=raw.get("reference", ""),
            status=OrderStatus(raw["status"]),
            priority=Priority(raw["priority"]),
            order_date=datetime.fromisoformat(raw["order_date"]),
            delivery_date=date.fromisoformat(delivery_date) if delivery_date else None,
            tracking_id=raw.get("tracking_id"),
            carrier=raw.get("carrier"),
            shipping_address=raw.get("shipping_address", ""),
            billing_address=raw.get("billing_address", ""),
            remarks=raw.get("remarks", ""),
            created_by=raw["created_by"],
            created_at=datetime.fromisoformat(raw["created_at"]),
            approved_by=raw.get("approved_by"),
            approved_at=_parse_datetime(raw.get("approved_at")),
            products=products,
            status_history=history,
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=f".{self._file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(json.dumps(orders, indent=2) + "\n")
            os.replace(tmp_name, self._file_path)
        except BaseException:
            os.unlink(tmp_name)
            raise

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
