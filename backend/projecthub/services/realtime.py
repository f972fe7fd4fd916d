"""
Realtime Change Broker

In-process pub/sub for row inserts. Data access publishes every new chat
message and activity entry; chat pages subscribe to one room (or one
project's activity) and receive the inserts as they happen.

Demo and real changes travel on separate channels so a demo visitor never
sees a real user's rows and vice versa.
"""

import asyncio
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from projecthub.core.logging import get_logger

logger = get_logger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"


@dataclass
class ChangeEvent:
    """A single row change."""
    table: str
    record: Dict[str, Any]
    mode: str
    change_type: ChangeType = ChangeType.INSERT
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def matches(self, table: str, column: Optional[str], value: Optional[str]) -> bool:
        if self.table != table:
            return False
        if column is None:
            return True
        return self.record.get(column) == value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "type": self.change_type.value,
            "table": self.table,
            "record": self.record,
            "timestamp": self.timestamp.isoformat(),
        }


class Subscription:
    """Queue of matching change events for one subscriber."""

    def __init__(
        self,
        broker: "ChangeBroker",
        mode: str,
        table: str,
        column: Optional[str] = None,
        value: Optional[str] = None,
        max_pending: int = 100,
    ) -> None:
        self.id = str(uuid.uuid4())
        self.broker = broker
        self.mode = mode
        self.table = table
        self.column = column
        self.value = value
        self.queue: "asyncio.Queue[ChangeEvent]" = asyncio.Queue(maxsize=max_pending)
        self.dropped = 0

    def offer(self, event: ChangeEvent) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Subscriber queue full, dropping change",
                subscription_id=self.id,
                table=self.table,
            )

    async def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """Next event, or None when ``timeout`` elapses first."""
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    async def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        while True:
            yield await self.queue.get()

    def close(self) -> None:
        self.broker.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class ChangeBroker:
    """Fan-out of insert events to matching subscriptions."""

    def __init__(self) -> None:
        self._subscriptions: Dict[Tuple[str, str], List[Subscription]] = defaultdict(list)
        self._metrics: Dict[str, int] = defaultdict(int)

    def subscribe(
        self,
        mode: str,
        table: str,
        column: Optional[str] = None,
        value: Optional[str] = None,
    ) -> Subscription:
        subscription = Subscription(self, mode, table, column, value)
        self._subscriptions[(mode, table)].append(subscription)
        logger.debug(
            "Realtime subscription opened",
            subscription_id=subscription.id,
            mode=mode,
            table=table,
            column=column,
            value=value,
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get((subscription.mode, subscription.table), [])
        if subscription in subscribers:
            subscribers.remove(subscription)
            logger.debug("Realtime subscription closed", subscription_id=subscription.id)

    def publish(self, mode: str, table: str, record: Dict[str, Any]) -> ChangeEvent:
        event = ChangeEvent(table=table, record=record, mode=mode)
        delivered = 0
        for subscription in list(self._subscriptions.get((mode, table), [])):
            if event.matches(table, subscription.column, subscription.value):
                subscription.offer(event)
                delivered += 1
        self._metrics["published"] += 1
        self._metrics["delivered"] += delivered
        return event

    def subscriber_count(self, mode: Optional[str] = None) -> int:
        return sum(
            len(subs)
            for (sub_mode, _), subs in self._subscriptions.items()
            if mode is None or sub_mode == mode
        )

    def get_metrics(self) -> Dict[str, int]:
        return {**self._metrics, "subscribers": self.subscriber_count()}


change_broker = ChangeBroker()


def get_change_broker() -> ChangeBroker:
    return change_broker
