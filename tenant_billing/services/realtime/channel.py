"""
Change Notification Channel

DESIGN DECISION: Stores announce their changes through a small in-process
publish/subscribe channel instead of a backend-specific realtime feed.
Any store implementation can publish, any listener can subscribe, and
neither needs to know how the other works.

Events carry the rows that changed, so a listener may either re-read the
whole table or patch its current list with `apply_change`.
"""

import inspect
from typing import Awaitable, Callable, Iterable, Optional, Union
from uuid import UUID, uuid4

import structlog

from tenant_billing.models.tenant import ChangeEvent, ChangeType, TenantRecord


ChangeCallback = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by `ChangeChannel.subscribe`."""

    def __init__(self, table: str, callback: ChangeCallback):
        self.subscription_id: UUID = uuid4()
        self.table = table
        self.callback = callback

    def __repr__(self) -> str:
        return f"Subscription(table={self.table!r}, id={self.subscription_id})"


class ChangeChannel:
    """
    Fan-out of change events to registered listeners.

    Callbacks may be plain functions or coroutines. They run in
    subscription order; a failing callback is logged and skipped so
    one broken listener cannot fail the store operation that published.
    """

    def __init__(self):
        self._subscriptions: dict[UUID, Subscription] = {}
        self._logger = structlog.get_logger(__name__)

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        """Register a callback for every change on `table`."""
        subscription = Subscription(table, callback)
        self._subscriptions[subscription.subscription_id] = subscription
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """
        Remove a subscription.

        Returns False if it was already removed.
        """
        return self._subscriptions.pop(subscription.subscription_id, None) is not None

    def subscriber_count(self, table: Optional[str] = None) -> int:
        return sum(
            1 for sub in self._subscriptions.values()
            if table is None or sub.table == table
        )

    async def publish(self, event: ChangeEvent) -> int:
        """
        Deliver an event to every subscriber of its table.

        Returns the number of callbacks that completed.
        """
        delivered = 0
        # Snapshot: callbacks may unsubscribe while we iterate
        for subscription in list(self._subscriptions.values()):
            if subscription.table != event.table:
                continue
            try:
                result = subscription.callback(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                self._logger.error(
                    "change_callback_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                    subscription_id=str(subscription.subscription_id),
                )
        return delivered


def apply_change(
    records: Iterable[TenantRecord],
    event: ChangeEvent,
) -> list[TenantRecord]:
    """
    Build a new list with the event applied.

    The input is not modified. Inserted rows go first, newest first,
    matching the store's default ordering (ties: later row first).
    """
    changed_ids = set(event.record_ids)
    remaining = [record for record in records if record.id not in changed_ids]

    if event.change_type is ChangeType.INSERT:
        inserted = sorted(
            reversed(event.records), key=lambda r: r.created_at, reverse=True
        )
        return inserted + remaining

    return remaining
