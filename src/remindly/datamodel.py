from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from remindly.utils import parse_local_min

__all__ = [
    "Appointment", "PartialAppointment",
    "PermissionState",
    "Notification",
]

# ----------------- Appointment ----------------
@dataclass(frozen=True)
class Appointment:
    id: str
    title: str
    date: str  # format: "YYYY-MM-DD"
    time: str  # format: "HH:MM", local wall clock

    @property
    def occurs_at(self) -> Optional[datetime]:
        return parse_local_min(self.date, self.time)

    def is_past(self, now: datetime) -> bool:
        occurs_at = self.occurs_at
        return occurs_at is not None and occurs_at < now

    def is_due(self, now: datetime) -> bool:
        occurs_at = self.occurs_at
        return occurs_at is not None and occurs_at <= now

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "Appointment":
        """Build from a stored JSON object.

        `id` and `title` must be strings (ValueError otherwise). A missing or
        non-string `date`/`time` is kept as "" so the record stays listed but
        never becomes due.
        """
        if not isinstance(data, dict):
            raise ValueError(f"appointment must be an object, got {type(data).__name__}")
        fields = {}
        for key in ("id", "title"):
            value = data.get(key)
            if not isinstance(value, str):
                raise ValueError(f"appointment field {key!r} must be a string, got {value!r}")
            fields[key] = value
        if not fields["id"]:
            raise ValueError("appointment id must not be empty")
        for key in ("date", "time"):
            value = data.get(key)
            fields[key] = value if isinstance(value, str) else ""
        return cls(**fields)


@dataclass(frozen=True)
class PartialAppointment:
    title: Optional[str] = None
    date: Optional[str] = None  # format: "YYYY-MM-DD"
    time: Optional[str] = None  # format: "HH:MM"

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


# ----------------- Notification ----------------
class PermissionState(str, Enum):
    UNSET = "unset"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class Notification:
    appointment_id: str
    title: str
    body: str
    sent_at: datetime
