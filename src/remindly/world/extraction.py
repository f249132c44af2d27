"""Free-text to appointment extraction.

The caller sees two distinct failure shapes:
- `None`: the service answered, but the answer does not fit the appointment
  shape (ask the user to rephrase);
- `ExtractionFailed`: the service could not be reached or answered garbage
  (ask the user to retry later).
"""

import asyncio
import json
import time
from datetime import datetime
from typing import Annotated, Callable, Optional

from pydantic import BaseModel, ConfigDict, StrictStr, StringConstraints, ValidationError

from remindly.config.prompts import EXTRACTION_PROMPT
from remindly.config.settings import EXTRACTION_TIMEOUT_SECONDS
from remindly.datamodel import PartialAppointment
from remindly.llm.base import JSONSchema, LLMClient
from remindly.logger import logger
from remindly.metrics import RuntimeMetrics
from remindly.utils import now_local

__all__ = ["AppointmentExtractor", "ExtractionFailed", "ExtractedAppointment", "APPOINTMENT_SCHEMA"]


APPOINTMENT_SCHEMA: JSONSchema = {
    "type": "object",
    "properties": {
        "title": {
            "type": ["string", "null"],
            "description": "The title or subject of the appointment.",
        },
        "date": {
            "type": ["string", "null"],
            "description": "The date of the appointment in YYYY-MM-DD format.",
        },
        "time": {
            "type": ["string", "null"],
            "description": "The time of the appointment in 24-hour HH:MM format.",
        },
    },
    "required": ["title", "date", "time"],
    "additionalProperties": False,
}


class ExtractionFailed(Exception):
    """The extraction service was unavailable or returned an unusable payload."""


class ExtractedAppointment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[StrictStr] = None
    date: Optional[Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")]] = None
    time: Optional[Annotated[StrictStr, StringConstraints(pattern=r"^[0-9]{2}:[0-9]{2}$")]] = None


class AppointmentExtractor:
    def __init__(
        self,
        llm_client: LLMClient,
        timeout_seconds: float = EXTRACTION_TIMEOUT_SECONDS,
        now: Callable[[], datetime] = now_local,
        metrics: RuntimeMetrics | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.timeout_seconds = timeout_seconds
        self.now = now
        self.metrics = metrics

    def build_prompt(self, free_text: str) -> str:
        today = self.now()
        return EXTRACTION_PROMPT.format(
            today=today.strftime("%Y-%m-%d"),
            year=today.year,
            text=free_text,
        )

    async def extract(self, free_text: str) -> Optional[PartialAppointment]:
        if not isinstance(free_text, str) or not free_text.strip():
            raise ValueError("free_text must be a non-empty string")

        started = time.perf_counter()
        try:
            raw = await asyncio.wait_for(
                self.llm_client.generate_json(self.build_prompt(free_text.strip()), APPOINTMENT_SCHEMA),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            self._record(started, error=True)
            logger.error(f"Extraction timed out after {self.timeout_seconds}s")
            raise ExtractionFailed("Extraction service timed out") from e
        except Exception as e:
            self._record(started, error=True)
            logger.error(f"Extraction service call failed: {e}")
            raise ExtractionFailed("Extraction service call failed") from e

        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            self._record(started, error=True)
            logger.error(f"Extraction service returned non-JSON output: {raw!r}")
            raise ExtractionFailed("Extraction service returned a malformed payload") from e
        if not isinstance(data, dict):
            self._record(started, error=True)
            logger.error(f"Extraction service returned a non-object payload: {raw!r}")
            raise ExtractionFailed("Extraction service returned a malformed payload")

        self._record(started)
        try:
            parsed = ExtractedAppointment.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Extracted appointment does not match the expected format: {data}; {e.error_count()} errors")
            return None

        result = PartialAppointment(title=parsed.title, date=parsed.date, time=parsed.time)
        logger.debug(f"Extracted appointment: {result}")
        return result

    def _record(self, started: float, error: bool = False) -> None:
        if self.metrics is not None:
            self.metrics.record_extraction((time.perf_counter() - started) * 1000, error=error)
