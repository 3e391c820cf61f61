"""Notifier port: abstract interface for in-app order notifications."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OrderNotification:
    title: str
    message: str
    link: str | None = None
    priority: str = "normal"  # "normal" | "high"


class Notifier(ABC):
    """Abstract interface for notification delivery adapters."""

    @abstractmethod
    def notify_customer(self, customer_id: str, notification: OrderNotification) -> None:
        """Deliver a notification to one customer."""
        ...

    @abstractmethod
    def notify_staff(self, notification: OrderNotification) -> None:
        """Deliver a notification to every staff and admin user."""
        ...
