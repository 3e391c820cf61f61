"""Notifier factory.

Provides get_notifier() / set_notifier() to swap implementations. The
in-memory FakeNotifier is the default.
"""

from storefront.notifier.fake_adapter import FakeNotifier
from storefront.notifier.port import Notifier, OrderNotification

__all__ = ["FakeNotifier", "Notifier", "OrderNotification", "get_notifier", "reset_notifier", "set_notifier"]

_current_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the current notifier. Defaults to FakeNotifier."""
    global _current_notifier
    if _current_notifier is None:
        _current_notifier = FakeNotifier()
    return _current_notifier


def set_notifier(notifier: Notifier) -> None:
    """Override the active notifier (useful for tests)."""
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    global _current_notifier
    _current_notifier = None
