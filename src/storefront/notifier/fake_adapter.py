"""In-memory notifier for development and testing.

Records every notification instead of delivering it, so tests and the local
API can inspect what customers and staff would have been told.
"""

from storefront.notifier.port import Notifier, OrderNotification


class FakeNotifier(Notifier):
    def __init__(self) -> None:
        self.customer_messages: list[tuple[str, OrderNotification]] = []
        self.staff_messages: list[OrderNotification] = []

    def notify_customer(self, customer_id: str, notification: OrderNotification) -> None:
        self.customer_messages.append((str(customer_id), notification))

    def notify_staff(self, notification: OrderNotification) -> None:
        self.staff_messages.append(notification)

    def messages_for(self, customer_id: str) -> list[OrderNotification]:
        return [n for recipient, n in self.customer_messages if recipient == str(customer_id)]

    def titles_for(self, customer_id: str) -> list[str]:
        return [n.title for n in self.messages_for(customer_id)]
