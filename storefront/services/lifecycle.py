"""
Order Lifecycle

Five-state linear workflow for a placed order:

    pending -> confirmed -> preparing -> ready -> delivered

The current status is derived from the time elapsed since the order was
created, using fixed offsets (default 2s, 8s, 15s, 25s). No timers are
scheduled: rebuilding a lifecycle for the same order, or reading it
again later, lands on the same status. Status only moves forward one
step at a time, even when several offsets have passed between reads or
the clock moves backwards.

Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from storefront.core.config import get_settings
from storefront.models import Order, OrderStatus

logger = logging.getLogger(__name__)

STATUS_SEQUENCE = tuple(OrderStatus)


class LifecycleError(Exception):
    """Raised on an impossible status transition."""


@dataclass
class StatusTransition:
    status: OrderStatus
    at: datetime


@dataclass
class StatusStep:
    """One point on the displayed timeline."""
    key: OrderStatus
    label: str
    completed: bool
    current: bool


@dataclass
class LifecycleSnapshot:
    order_id: str
    status: OrderStatus
    label: str
    estimated_minutes: int
    progress_percent: float
    elapsed_seconds: float
    is_complete: bool
    steps: list[StatusStep] = field(default_factory=list)


class StatusTimeline:
    """
    Offsets from order creation at which each status is reached.

    Args:
        offsets: Seconds until confirmed, preparing, ready and delivered
        estimates: Minutes remaining to show for each status
    """

    def __init__(
        self,
        offsets: Optional[Sequence[float]] = None,
        estimates: Optional[dict[OrderStatus, int]] = None,
    ):
        settings = get_settings()
        offsets = list(offsets if offsets is not None else settings.status_offsets_list)
        if len(offsets) != len(STATUS_SEQUENCE) - 1:
            raise ValueError(f"Expected {len(STATUS_SEQUENCE) - 1} offsets, got {len(offsets)}")
        if offsets != sorted(offsets) or any(o < 0 for o in offsets):
            raise ValueError("Offsets must be non-negative and non-decreasing")

        self.offsets: dict[OrderStatus, float] = {OrderStatus.PENDING: 0.0}
        for status, offset in zip(STATUS_SEQUENCE[1:], offsets):
            self.offsets[status] = float(offset)

        full_eta = settings.estimated_delivery_minutes
        self.estimates: dict[OrderStatus, int] = {
            OrderStatus.PENDING: full_eta,
            OrderStatus.CONFIRMED: full_eta,
            OrderStatus.PREPARING: 30,
            OrderStatus.READY: 15,
            OrderStatus.DELIVERED: 0,
        }
        if estimates:
            self.estimates.update(estimates)

    def status_at(self, elapsed_seconds: float) -> OrderStatus:
        """Latest status whose offset has passed."""
        reached = OrderStatus.PENDING
        for status in STATUS_SEQUENCE:
            if elapsed_seconds >= self.offsets[status]:
                reached = status
        return reached


class OrderLifecycle:
    """
    Drives an order's status from its creation time.

    Example:
        >>> lifecycle = OrderLifecycle(order)
        >>> lifecycle.refresh(order.created_at + timedelta(seconds=9)).status
        <OrderStatus.PREPARING: 'preparing'>
    """

    def __init__(
        self,
        order: Order,
        timeline: Optional[StatusTimeline] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.order = order
        self.timeline = timeline or StatusTimeline()
        self._clock = clock
        self.history: list[StatusTransition] = [
            StatusTransition(order.status, self._reached_at(order.status))
        ]

    def _reached_at(self, status: OrderStatus) -> datetime:
        return self.order.created_at + timedelta(seconds=self.timeline.offsets[status])

    @property
    def status(self) -> OrderStatus:
        return self.order.status

    @property
    def is_complete(self) -> bool:
        return self.order.status == OrderStatus.DELIVERED

    def advance(self, at: Optional[datetime] = None) -> OrderStatus:
        """
        Move to the next status.

        Raises:
            LifecycleError: order is already delivered
        """
        following = self.order.status.next
        if following is None:
            raise LifecycleError(f"Order #{self.order.id} is already {self.order.status.value}")

        self.order.status = following
        self.history.append(StatusTransition(following, at or self._reached_at(following)))
        logger.info(f"Order #{self.order.id}: status -> {following.value}")
        return following

    def refresh(self, now: Optional[datetime] = None) -> LifecycleSnapshot:
        """Catch the status up with the elapsed time and describe it."""
        now = now or self._clock()
        elapsed = (now - self.order.created_at).total_seconds()
        target = self.timeline.status_at(elapsed)

        while self.order.status.index < target.index:
            self.advance()

        return self.snapshot(elapsed)

    def snapshot(self, elapsed_seconds: float = 0.0) -> LifecycleSnapshot:
        current = self.order.status
        last_index = len(STATUS_SEQUENCE) - 1
        steps = [
            StatusStep(
                key=status,
                label=status.step_label,
                completed=status.index <= current.index,
                current=status == current,
            )
            for status in STATUS_SEQUENCE
        ]
        return LifecycleSnapshot(
            order_id=self.order.id,
            status=current,
            label=current.display_name,
            estimated_minutes=self.timeline.estimates[current],
            progress_percent=round(current.index / last_index * 100, 1),
            elapsed_seconds=max(elapsed_seconds, 0.0),
            is_complete=self.is_complete,
            steps=steps,
        )
