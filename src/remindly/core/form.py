"""In-progress create/edit state for one appointment.

Extraction results are applied only if they belong to the latest request of the
currently open form; anything that arrives after close(), a re-open() or a
newer fill_from_text() is discarded.
"""

import asyncio
from typing import Optional

from remindly.core.app import InvalidAppointmentError, RemindersApp
from remindly.datamodel import Appointment, PartialAppointment
from remindly.logger import logger
from remindly.world.extraction import ExtractionFailed

__all__ = ["AppointmentForm"]


class AppointmentForm:
    MSG_REQUIRED = "Title, date, and time are required."
    MSG_NOT_UNDERSTOOD = "Couldn't understand the request. Please be more specific."
    MSG_UNAVAILABLE = "Failed to generate details. Please try again."

    def __init__(self, app: RemindersApp) -> None:
        self.app = app
        self.is_open = False
        self.editing: Optional[Appointment] = None
        self.title = ""
        self.date = ""
        self.time = ""
        self.error = ""
        self.generating = False
        self._generation = 0
        self._extract_task: Optional[asyncio.Task] = None

    def open(self, appointment: Optional[Appointment] = None) -> None:
        self._invalidate()
        self.is_open = True
        self.editing = appointment
        self.title = appointment.title if appointment else ""
        self.date = appointment.date if appointment else ""
        self.time = appointment.time if appointment else ""
        self.error = ""

    def close(self) -> None:
        self._invalidate()
        self.is_open = False
        self.editing = None
        self.title = self.date = self.time = ""
        self.error = ""

    def _invalidate(self) -> None:
        self._generation += 1
        self.generating = False
        if self._extract_task is not None and not self._extract_task.done():
            self._extract_task.cancel()
        self._extract_task = None

    def _apply(self, partial: PartialAppointment) -> None:
        if partial.title:
            self.title = partial.title
        if partial.date:
            self.date = partial.date
        if partial.time:
            self.time = partial.time

    async def fill_from_text(self, text: str) -> bool:
        """Extract from free text into the form. Returns True when the form was filled."""
        if not self.is_open:
            raise RuntimeError("Form is not open")
        if not text or not text.strip():
            return False

        self._invalidate()
        generation = self._generation
        self.generating = True
        self.error = ""
        task = asyncio.create_task(self.app.extract(text), name="appointment-extract")
        self._extract_task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Extraction superseded, result discarded")
                return False
            raise
        except ExtractionFailed as e:
            if generation == self._generation:
                self.error = self.MSG_UNAVAILABLE
                logger.warning(f"Form extraction failed: {e}")
            return False
        finally:
            if generation == self._generation:
                self.generating = False
                self._extract_task = None

        if generation != self._generation:
            logger.debug("Extraction finished after the form moved on, result discarded")
            return False
        if result is None:
            self.error = self.MSG_NOT_UNDERSTOOD
            return False
        self._apply(result)
        return True

    async def save(self) -> Optional[Appointment]:
        """Create or update the appointment and close the form. Returns None when the form is incomplete."""
        if not self.is_open:
            raise RuntimeError("Form is not open")
        if not self.title or not self.date or not self.time:
            self.error = self.MSG_REQUIRED
            return None

        try:
            if self.editing is not None:
                saved = await self.app.update(self.editing.id, self.title, self.date, self.time)
            else:
                saved = await self.app.add(self.title, self.date, self.time)
        except InvalidAppointmentError as e:
            self.error = str(e)
            return None

        self.close()
        return saved
