"""Dispatch record: ids of appointments already notified in this process.

The reminder scheduler adds an id when it delivers a notification; the
appointment store discards an id whenever that appointment is updated or
removed, so a rescheduled appointment becomes eligible again. Never persisted.
"""

from typing import Set

__all__ = ["DispatchRecord"]


class DispatchRecord:
    def __init__(self) -> None:
        self._ids: Set[str] = set()

    def __contains__(self, appointment_id: object) -> bool:
        return appointment_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def mark(self, appointment_id: str) -> None:
        self._ids.add(appointment_id)

    def discard(self, appointment_id: str) -> None:
        self._ids.discard(appointment_id)
