"""
Poll options: tick period configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from orderwatch.config import Settings

DEFAULT_INTERVAL_MS = 3000


@dataclass(frozen=True, slots=True)
class PollOptions:
    """
    Poller configuration.

    Immutable: with_interval() returns a new instance.

    Example:
        PollOptions()                          # every 3s
        PollOptions(interval_ms=1000)
        PollOptions().with_interval(seconds=5)
        PollOptions.from_settings(settings)
    """

    interval_ms: int = DEFAULT_INTERVAL_MS

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {self.interval_ms}")

    @property
    def interval(self) -> float:
        """Tick period in seconds."""
        return self.interval_ms / 1000

    def with_interval(
        self,
        *,
        ms: int | None = None,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> PollOptions:
        if delta is not None:
            return PollOptions(interval_ms=round(delta.total_seconds() * 1000))
        if seconds is not None:
            return PollOptions(interval_ms=round(seconds * 1000))
        if ms is not None:
            return PollOptions(interval_ms=ms)
        raise ValueError("Must provide ms, seconds or delta")

    @classmethod
    def from_settings(cls, settings: Settings) -> PollOptions:
        return cls(interval_ms=settings.POLL_INTERVAL_MS)


__all__ = ("DEFAULT_INTERVAL_MS", "PollOptions")
