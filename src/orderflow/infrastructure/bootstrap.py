"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from orderflow.config import get_settings
from orderflow.infrastructure.logging import configure_logging
from orderflow.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)


def setup_logging() -> None:
    configure_logging(get_settings().log_level)


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(get_settings().orders_file)


def default_user() -> str:
    return get_settings().default_user
