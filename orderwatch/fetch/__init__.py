"""
Fetch: the pull-only I/O edge.

    from orderwatch import fetch as F

    fetcher = F.HttpOrderFetcher.from_settings(settings, token=token)
    result = await fetcher.fetch_one(order_id)
"""

from __future__ import annotations

from orderwatch.fetch._types import (
    FetchFailureKind,
    FetchFailure,
    FetchError,
    OrderFetcher,
    raised_failure,
    guarded,
)
from orderwatch.fetch._http import HttpOrderFetcher

__all__ = (
    "FetchFailureKind",
    "FetchFailure",
    "FetchError",
    "OrderFetcher",
    "raised_failure",
    "guarded",
    "HttpOrderFetcher",
)
