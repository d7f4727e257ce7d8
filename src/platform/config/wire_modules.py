"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    cancel_order_use_case,
    checkout_cart_use_case,
    handle_payment_notification_use_case,
    refund_order_use_case,
    reserve_tickets_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    reserve_tickets_use_case,
    checkout_cart_use_case,
    handle_payment_notification_use_case,
    cancel_order_use_case,
    refund_order_use_case,
]
