"""
Notify: status transition events.

    from orderwatch import notify as N

    notifier = N.TransitionNotifier()
    unsubscribe = notifier.subscribe(show_banner)
"""

from __future__ import annotations

from orderwatch.notify._notifier import Transition, Listener, TransitionNotifier

__all__ = ("Transition", "Listener", "TransitionNotifier")
