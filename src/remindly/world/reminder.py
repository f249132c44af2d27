"""
Reminder scheduler.

Per appointment: Pending -> Due -> Notified. An appointment is due once its
local date+time is at or before now; it is notified at most once per due
transition, and only while permission is granted. Due appointments that could
not be notified are retried on every pass, so a late permission grant still
delivers them.
"""

import asyncio
import time
from datetime import datetime
from typing import Callable, List, Optional

from remindly.config.settings import (
    NOTIFICATION_TIMEOUT_SECONDS,
    NOTIFICATION_TITLE,
    REMINDER_CHECK_INTERVAL_SECONDS,
)
from remindly.datamodel import Appointment, Notification, PermissionState
from remindly.logger import logger
from remindly.metrics import RuntimeMetrics
from remindly.storage.appointment import AppointmentStore
from remindly.utils import now_local
from remindly.world.dispatch import DispatchRecord
from remindly.world.notifier import Notifier
from remindly.world.permission import PermissionController

__all__ = ["ReminderScheduler"]


class ReminderScheduler:
    def __init__(
        self,
        store: AppointmentStore,
        dispatch_record: DispatchRecord,
        permission: PermissionController,
        notifier: Notifier,
        interval_seconds: float = REMINDER_CHECK_INTERVAL_SECONDS,
        now: Callable[[], datetime] = now_local,
        notify_timeout_seconds: float = NOTIFICATION_TIMEOUT_SECONDS,
        metrics: Optional[RuntimeMetrics] = None,
    ) -> None:
        self.store = store
        self.dispatch_record = dispatch_record
        self.permission = permission
        self.notifier = notifier
        self.interval_seconds = interval_seconds
        self.now = now
        self.metrics = metrics
        self.notify_timeout_seconds = notify_timeout_seconds

        self._shutdown_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task[None]] = None
        self.last_check_at_epoch: Optional[float] = None

    def get_status(self) -> dict[str, object]:
        running = self._shutdown_event is not None and not self._shutdown_event.is_set()
        return {
            "running": running,
            "interval_seconds": self.interval_seconds,
            "last_check_at_epoch": self.last_check_at_epoch,
            "notified_count": len(self.dispatch_record),
        }

    async def tick(self) -> List[Appointment]:
        """Run one due-check pass. Returns the appointments notified in this pass."""
        self.last_check_at_epoch = time.time()
        if self.permission.state != PermissionState.GRANTED:
            return []

        now = self.now()
        notified: List[Appointment] = []
        for appointment in self.store.list():
            if appointment.id in self.dispatch_record:
                continue
            if not appointment.is_due(now):
                continue

            notification = Notification(
                appointment_id=appointment.id,
                title=NOTIFICATION_TITLE,
                body=appointment.title,
                sent_at=now,
            )
            try:
                await asyncio.wait_for(self.notifier.send(notification), timeout=self.notify_timeout_seconds)
            except asyncio.TimeoutError:
                logger.error(f"Reminder delivery for appointment {appointment.id} timed out after {self.notify_timeout_seconds}s")
                if self.metrics is not None:
                    self.metrics.record_notification(error=True)
                continue
            except Exception as e:
                logger.error(f"Failed to deliver reminder for appointment {appointment.id}: {e}")
                if self.metrics is not None:
                    self.metrics.record_notification(error=True)
                continue

            if self.store.get(appointment.id) is appointment:
                # not marked if edited or removed while the alert was in flight
                self.dispatch_record.mark(appointment.id)
            notified.append(appointment)
            if self.metrics is not None:
                self.metrics.record_notification()
            logger.info(f"Reminder delivered: id={appointment.id}, due {appointment.date} {appointment.time}")
        return notified

    async def main_loop(self, shutdown_event: asyncio.Event) -> None:
        self._shutdown_event = shutdown_event
        logger.info(f"Reminder loop started, checking every {self.interval_seconds}s")

        while not shutdown_event.is_set():
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Reminder pass failed: {e}")

            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Reminder loop stopped")

    def start(self, shutdown_event: Optional[asyncio.Event] = None) -> asyncio.Task[None]:
        if self._task is not None and not self._task.done():
            return self._task
        self._shutdown_event = shutdown_event or asyncio.Event()
        self._task = asyncio.create_task(
            self.main_loop(self._shutdown_event),
            name="reminder-scheduler",
        )
        return self._task

    async def stop(self) -> None:
        if self._shutdown_event is not None:
            self._shutdown_event.set()
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
