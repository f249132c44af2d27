"""Appointment store: the in-memory collection plus its JSON snapshot in the key-value store.

Every mutation is applied in memory first (visible immediately, in call order),
then the whole collection is written under APPOINTMENTS_KEY. Read and write
failures are logged and never raised.
"""

import json
from typing import Dict, List, Optional

from remindly.datamodel import Appointment
from remindly.events import Bus, E
from remindly.logger import logger
from remindly.metrics import RuntimeMetrics
from remindly.storage.kv import KeyValueStore
from remindly.world.dispatch import DispatchRecord

__all__ = ["AppointmentStore", "StoreError", "DuplicateIdError", "NotFoundError", "APPOINTMENTS_KEY",
           "dump_appointments", "load_appointments"]

APPOINTMENTS_KEY = "appointments"


class StoreError(Exception):
    pass


class DuplicateIdError(StoreError):
    def __init__(self, appointment_id: str) -> None:
        super().__init__(f"Appointment id already exists: {appointment_id}")
        self.appointment_id = appointment_id


class NotFoundError(StoreError):
    def __init__(self, appointment_id: str) -> None:
        super().__init__(f"Appointment not found: {appointment_id}")
        self.appointment_id = appointment_id


def dump_appointments(appointments: List[Appointment]) -> str:
    return json.dumps([a.to_dict() for a in appointments], ensure_ascii=False)


def load_appointments(raw: str) -> List[Appointment]:
    """Parse a stored snapshot. Raises ValueError on corrupt JSON, schema mismatch or duplicate ids."""
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"stored appointments must be a JSON array, got {type(data).__name__}")
    appointments = [Appointment.from_dict(item) for item in data]
    ids = [a.id for a in appointments]
    if len(set(ids)) != len(ids):
        raise ValueError("stored appointments contain duplicate ids")
    return appointments


class AppointmentStore:
    def __init__(
        self,
        kv: KeyValueStore,
        dispatch_record: DispatchRecord,
        bus: Optional[Bus] = None,
        metrics: Optional[RuntimeMetrics] = None,
    ) -> None:
        self.kv = kv
        self.dispatch_record = dispatch_record
        self.bus = bus
        self.metrics = metrics
        # dict keeps insertion order, which is the tie-breaker for the ordered view
        self._appointments: Dict[str, Appointment] = {}
        self.loaded = False
        # set when the stored snapshot could not be read; cleared by the next successful write
        self.load_error: Optional[str] = None

    async def load(self) -> None:
        """Read the persisted collection. Anything unreadable yields an empty collection."""
        self._appointments = {}
        self.load_error = None
        try:
            raw = await self.kv.get(APPOINTMENTS_KEY)
            if raw is None:
                logger.info("No stored appointments, starting with an empty collection")
            else:
                for appointment in load_appointments(raw):
                    self._appointments[appointment.id] = appointment
                logger.info(f"Loaded {len(self._appointments)} appointments")
        except Exception as e:
            logger.warning(f"Failed to read stored appointments, starting with an empty collection: {e}")
            self._appointments = {}
            self.load_error = str(e)
        self.loaded = True

    def list(self) -> List[Appointment]:
        return list(self._appointments.values())

    def get(self, appointment_id: str) -> Optional[Appointment]:
        return self._appointments.get(appointment_id)

    async def add(self, appointment: Appointment) -> None:
        if appointment.id in self._appointments:
            raise DuplicateIdError(appointment.id)
        self._appointments[appointment.id] = appointment
        logger.debug(f"Appointment added: id={appointment.id}, {appointment.date} {appointment.time}")
        self._emit(E.APPOINTMENT_ADDED, appointment=appointment)
        await self._persist()

    async def update(self, appointment: Appointment) -> None:
        if appointment.id not in self._appointments:
            raise NotFoundError(appointment.id)
        self._appointments[appointment.id] = appointment
        self.dispatch_record.discard(appointment.id)
        logger.debug(f"Appointment updated: id={appointment.id}, {appointment.date} {appointment.time}")
        self._emit(E.APPOINTMENT_UPDATED, appointment=appointment)
        await self._persist()

    async def remove(self, appointment_id: str) -> None:
        self.dispatch_record.discard(appointment_id)
        removed = self._appointments.pop(appointment_id, None)
        if removed is None:
            logger.debug(f"Remove ignored, no appointment with id={appointment_id}")
            return
        logger.debug(f"Appointment removed: id={appointment_id}")
        self._emit(E.APPOINTMENT_REMOVED, appointment=removed)
        await self._persist()

    def _emit(self, event: str, **kwargs) -> None:
        if self.bus is not None:
            self.bus.emit(event, **kwargs)

    async def _persist(self) -> None:
        # snapshot is taken before the await so writes land in mutation order
        snapshot = dump_appointments(self.list())
        try:
            await self.kv.set(APPOINTMENTS_KEY, snapshot)
        except Exception as e:
            logger.error(f"Failed to save appointments, in-memory state is kept: {e}")
            if self.metrics is not None:
                self.metrics.record_store_write_failure()
        else:
            self.load_error = None
