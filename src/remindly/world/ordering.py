"""Display-ready view of the appointment collection.

Ordering is always computed here and never stored. Appointments whose date or
time cannot be parsed sort after every valid one, in insertion order.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Literal, Optional, Tuple

from remindly.datamodel import Appointment

__all__ = ["AppointmentView", "ListState", "ListStatus", "ordered_view", "list_state", "loading_state", "error_state"]

ListStatus = Literal["loading", "error", "empty", "ready"]


@dataclass(frozen=True)
class AppointmentView:
    appointment: Appointment
    occurs_at: Optional[datetime]
    is_past: bool
    display_date: str
    display_time: str

    def to_dict(self) -> dict:
        return {
            **self.appointment.to_dict(),
            "occurs_at": self.occurs_at.isoformat(timespec="minutes") if self.occurs_at else None,
            "is_past": self.is_past,
            "display_date": self.display_date,
            "display_time": self.display_time,
        }


@dataclass(frozen=True)
class ListState:
    status: ListStatus
    items: List[AppointmentView] = field(default_factory=list)
    error: Optional[str] = None


def _display(appointment: Appointment, occurs_at: Optional[datetime]) -> Tuple[str, str]:
    if not appointment.date or not appointment.time:
        return "No date", "No time"
    if occurs_at is None:
        return "Invalid date", "Invalid time"
    # e.g. "Wednesday, March 5, 2025" / "02:30 PM"
    display_date = f"{occurs_at:%A}, {occurs_at:%B} {occurs_at.day}, {occurs_at.year}"
    return display_date, occurs_at.strftime("%I:%M %p")


def _sort_key(view: AppointmentView) -> Tuple[int, datetime]:
    if view.occurs_at is None:
        return 1, datetime.max
    return 0, view.occurs_at


def ordered_view(appointments: Iterable[Appointment], now: datetime) -> List[AppointmentView]:
    views = []
    for appointment in appointments:
        occurs_at = appointment.occurs_at
        display_date, display_time = _display(appointment, occurs_at)
        views.append(AppointmentView(
            appointment=appointment,
            occurs_at=occurs_at,
            is_past=appointment.is_past(now),
            display_date=display_date,
            display_time=display_time,
        ))
    # sorted() is stable, so equal times keep insertion order
    return sorted(views, key=_sort_key)


def list_state(appointments: Iterable[Appointment], now: datetime) -> ListState:
    items = ordered_view(appointments, now)
    if not items:
        return ListState(status="empty")
    return ListState(status="ready", items=items)


def loading_state() -> ListState:
    return ListState(status="loading")


def error_state(message: str) -> ListState:
    return ListState(status="error", error=message)
