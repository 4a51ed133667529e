"""One-second tick sources driving the timer state machine."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

TickCallback = Callable[[], None]


class ClockSubscription:
    """Handle for one live tick subscription."""
    def __init__(
        self,
        callback: TickCallback,
        *,
        on_cancel: Callable[["ClockSubscription"], None],
        next_due: float = 0.0,
    ):
        self._callback = callback
        self._on_cancel = on_cancel
        self._active = True
        self.next_due = next_due

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._on_cancel(self)

    def fire(self) -> None:
        if self._active:
            self._callback()


class ClockSource(Protocol):
    def subscribe(self, callback: TickCallback) -> ClockSubscription:
        ...


class _SubscriptionRegistry:
    def __init__(self) -> None:
        self._subscriptions: list[ClockSubscription] = []

    @property
    def active_subscriptions(self) -> int:
        return len(self._subscriptions)

    def _register(self, subscription: ClockSubscription) -> ClockSubscription:
        self._subscriptions.append(subscription)
        return subscription

    def _discard(self, subscription: ClockSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _live(self) -> tuple[ClockSubscription, ...]:
        return tuple(self._subscriptions)


class MonotonicClock(_SubscriptionRegistry):
    """Cooperative clock pumped from the host loop.

    Each call to :meth:`pump` fires every live subscription once per whole
    interval of ``time.monotonic()`` elapsed since it last fired, so a host
    loop that sleeps irregularly never drops or doubles a second.
    """

    def __init__(
        self,
        *,
        interval_seconds: float = 1.0,
        monotonic_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__()
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._interval = float(interval_seconds)
        self._monotonic = monotonic_fn or time.monotonic
        self._logger = logger or logging.getLogger("clock")

    def subscribe(self, callback: TickCallback) -> ClockSubscription:
        return self._register(
            ClockSubscription(
                callback,
                on_cancel=self._discard,
                next_due=self._monotonic() + self._interval,
            )
        )

    def pump(self) -> int:
        """Fire due ticks and return how many were delivered."""
        now = self._monotonic()
        fired = 0
        for subscription in self._live():
            while subscription.active and now >= subscription.next_due:
                subscription.next_due += self._interval
                subscription.fire()
                fired += 1
        if fired > 1:
            self._logger.debug("Clock caught up %d ticks", fired)
        return fired


class ManualClock(_SubscriptionRegistry):
    """Deterministic clock advanced explicitly by tests and harnesses."""

    def subscribe(self, callback: TickCallback) -> ClockSubscription:
        return self._register(ClockSubscription(callback, on_cancel=self._discard))

    def advance(self, seconds: int = 1) -> None:
        for _ in range(seconds):
            for subscription in self._live():
                subscription.fire()
