"""
Core types for orderwatch.

Re-exports from kungfu + shared aliases.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════════

type OrderId = int | str
"""Opaque, server-assigned order identity."""

# ═══════════════════════════════════════════════════════════════════════════════
# Scheduling
# ═══════════════════════════════════════════════════════════════════════════════

type Sleep = Callable[[float], Awaitable[None]]
"""Suspend for N seconds. asyncio.sleep in production, a manual clock in tests."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "OrderId",
    "Sleep",
)
