from abc import ABC, abstractmethod

from remindly.datamodel import Notification
from remindly.events import Bus, E
from remindly.logger import logger

__all__ = ["Notifier", "LogNotifier", "BusNotifier"]


class Notifier(ABC):
    @abstractmethod
    async def send(self, notification: Notification) -> None:
        """Deliver one user-visible alert. Raise if delivery failed."""


class LogNotifier(Notifier):
    async def send(self, notification: Notification) -> None:
        logger.success(f"[{notification.title}] {notification.body}")


class BusNotifier(Notifier):
    """Hands the alert to whatever presentation layer listens on the bus."""

    def __init__(self, bus: Bus) -> None:
        self.bus = bus

    async def send(self, notification: Notification) -> None:
        self.bus.emit(E.NOTIFICATION_SENT, notification=notification)
