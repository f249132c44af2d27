"""Remindly application service

One RemindersApp is built at startup and owns all process-wide state: the
appointment store, the dispatch record, the permission state, the reminder
scheduler task and the extractor. The presentation layer (HTTP API, form flow)
talks only to this object.

# Lifecycle
1. construct with an opened KeyValueStore and the host collaborators;
2. `await start()` loads appointments and permission, then starts the scheduler;
3. `await close()` cancels the scheduler task. The key-value store is closed by its owner.
"""

import asyncio
from datetime import datetime
from typing import Callable, List, Optional

from ulid import ULID

from remindly.config.settings import EXTRACTION_TIMEOUT_SECONDS, REMINDER_CHECK_INTERVAL_SECONDS
from remindly.datamodel import Appointment, PartialAppointment, PermissionState
from remindly.events import Bus
from remindly.llm.base import LLMClient
from remindly.logger import logger
from remindly.metrics import RuntimeMetrics
from remindly.storage.appointment import AppointmentStore
from remindly.storage.kv import KeyValueStore
from remindly.utils import is_date_str, is_time_str, now_local, parse_local_min
from remindly.world.dispatch import DispatchRecord
from remindly.world.extraction import AppointmentExtractor, ExtractionFailed
from remindly.world.notifier import LogNotifier, Notifier
from remindly.world.ordering import ListState, error_state, list_state, loading_state
from remindly.world.permission import PermissionController, PermissionHost
from remindly.world.reminder import ReminderScheduler

__all__ = ["RemindersApp", "InvalidAppointmentError"]


class InvalidAppointmentError(ValueError):
    pass


def _validated(title: str, date: str, time: str) -> tuple[str, str, str]:
    if not isinstance(title, str) or not title.strip():
        raise InvalidAppointmentError("Title, date, and time are required.")
    if not is_date_str(date) or not is_time_str(time):
        raise InvalidAppointmentError("Date must be YYYY-MM-DD and time must be HH:MM.")
    if parse_local_min(date, time) is None:
        raise InvalidAppointmentError(f"Not a valid date/time: {date} {time}")
    return title.strip(), date, time


class RemindersApp:
    def __init__(
        self,
        kv: KeyValueStore,
        permission_host: Optional[PermissionHost] = None,
        notifier: Optional[Notifier] = None,
        llm_client: Optional[LLMClient] = None,
        now: Callable[[], datetime] = now_local,
        interval_seconds: float = REMINDER_CHECK_INTERVAL_SECONDS,
        extraction_timeout_seconds: float = EXTRACTION_TIMEOUT_SECONDS,
        bus: Optional[Bus] = None,
    ) -> None:
        self.now = now
        self.bus = bus or Bus()
        self.metrics = RuntimeMetrics()
        self.dispatch_record = DispatchRecord()
        self.store = AppointmentStore(kv, self.dispatch_record, bus=self.bus, metrics=self.metrics)
        self.permission = PermissionController(permission_host, bus=self.bus)
        self.scheduler = ReminderScheduler(
            store=self.store,
            dispatch_record=self.dispatch_record,
            permission=self.permission,
            notifier=notifier or LogNotifier(),
            interval_seconds=interval_seconds,
            now=now,
            metrics=self.metrics,
        )
        self.extractor: Optional[AppointmentExtractor] = None
        if llm_client is not None:
            self.extractor = AppointmentExtractor(
                llm_client,
                timeout_seconds=extraction_timeout_seconds,
                now=now,
                metrics=self.metrics,
            )

    def get_status(self) -> dict[str, object]:
        return {
            "loaded": self.store.loaded,
            "appointments": len(self.store.list()),
            "permission": self.permission.state.value,
            "extraction_available": self.extractor is not None,
            "scheduler": self.scheduler.get_status(),
        }

    async def start(self, shutdown_event: Optional[asyncio.Event] = None, run_scheduler: bool = True) -> None:
        await self.store.load()
        await self.permission.load()
        if run_scheduler:
            self.scheduler.start(shutdown_event)
        logger.info("Remindly started")

    async def close(self) -> None:
        await self.scheduler.stop()
        logger.info("Remindly stopped")

    # ----------------- appointments ----------------
    def list(self) -> List[Appointment]:
        return self.store.list()

    def get(self, appointment_id: str) -> Optional[Appointment]:
        return self.store.get(appointment_id)

    def ordered(self) -> ListState:
        if not self.store.loaded:
            return loading_state()
        if self.store.load_error is not None:
            return error_state(f"Saved appointments could not be read: {self.store.load_error}")
        return list_state(self.store.list(), self.now())

    async def add(self, title: str, date: str, time: str) -> Appointment:
        title, date, time = _validated(title, date, time)
        appointment = Appointment(id=str(ULID()), title=title, date=date, time=time)
        await self.store.add(appointment)
        return appointment

    async def update(self, appointment_id: str, title: str, date: str, time: str) -> Appointment:
        title, date, time = _validated(title, date, time)
        appointment = Appointment(id=appointment_id, title=title, date=date, time=time)
        await self.store.update(appointment)
        return appointment

    async def remove(self, appointment_id: str) -> None:
        await self.store.remove(appointment_id)

    # ----------------- extraction ----------------
    async def extract(self, text: str) -> Optional[PartialAppointment]:
        if self.extractor is None:
            raise ExtractionFailed("No extraction service is configured")
        return await self.extractor.extract(text)

    # ----------------- notifications ----------------
    @property
    def permission_state(self) -> PermissionState:
        return self.permission.state

    async def request_permission(self) -> PermissionState:
        return await self.permission.request()
