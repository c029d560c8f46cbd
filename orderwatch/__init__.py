"""
orderwatch: order-status synchronization for storefront clients.

    from orderwatch import order as O   # Snapshot model + decoding
    from orderwatch import fetch as F   # Pull-only I/O edge
    from orderwatch import notify as N  # Transition events
    from orderwatch import poll as P    # Active-set and entity pollers
"""

from orderwatch import order
from orderwatch import fetch
from orderwatch import notify
from orderwatch import poll
from orderwatch._types import OrderId, Sleep

__version__ = "0.1.0"

__all__ = (
    "order",
    "fetch",
    "notify",
    "poll",
    "OrderId",
    "Sleep",
)
