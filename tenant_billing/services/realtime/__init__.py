"""Realtime change notification."""

from tenant_billing.services.realtime.channel import (
    ChangeCallback,
    ChangeChannel,
    Subscription,
    apply_change,
)

__all__ = [
    "ChangeCallback",
    "ChangeChannel",
    "Subscription",
    "apply_change",
]
