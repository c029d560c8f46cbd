"""
Poll: keep a client view of server-owned orders in sync.

    from orderwatch import poll as P

    orders = P.ActiveSetPoller(fetcher, options=P.PollOptions(interval_ms=3000))
    detail = P.EntityPoller(fetcher, order_id, OrderStatus.PENDING)

Both pollers are single-flight (a tick that finds a fetch in flight is
skipped), stop on the first error, and own independent timers and
notifiers even when they watch the same order.
"""

from __future__ import annotations

from orderwatch.poll._options import DEFAULT_INTERVAL_MS, PollOptions
from orderwatch.poll._ticker import Ticker
from orderwatch.poll._entity import EntityPoller
from orderwatch.poll._active_set import ActiveSetPoller

__all__ = (
    "DEFAULT_INTERVAL_MS",
    "PollOptions",
    "Ticker",
    "EntityPoller",
    "ActiveSetPoller",
)
