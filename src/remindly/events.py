"""Application event bus: the Bus class and the event-name namespace E.

The appointment store publishes its change stream here; notifiers and the
HTTP layer may subscribe. Each RemindersApp owns its own Bus instance.
"""

from __future__ import annotations
from pyee.asyncio import AsyncIOEventEmitter
from typing import Any, Awaitable, Callable, Union

from remindly.logger import logger

Handler = Callable[..., Union[Awaitable[None], None]]

# Event names
class E:
    APPOINTMENT_ADDED = "appointment.added"
    APPOINTMENT_UPDATED = "appointment.updated"
    APPOINTMENT_REMOVED = "appointment.removed"
    NOTIFICATION_SENT = "notification.sent"
    PERMISSION_CHANGED = "permission.changed"


class Bus(AsyncIOEventEmitter):
    def on(self, event: str) -> Callable[[Handler], Handler]:
        """Decorator registering an event handler"""
        def decorator(handler: Handler) -> Handler:
            logger.debug(f"Registering event handler: {event} -> {getattr(handler, '__name__', handler)}")
            super(Bus, self).on(event, handler)
            return handler

        return decorator

    def emit(self, event: str, *args: Any, **kwargs: Any) -> bool:
        logger.trace(f"Event: {event} {kwargs}")
        return super().emit(event, *args, **kwargs)


__all__ = ["Bus", "E", "Handler"]
