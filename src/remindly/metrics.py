"""
Simple runtime counters: notifications, extraction calls and store write failures.
"""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class RuntimeMetrics:
    notification_sent_count: int = 0
    notification_error_count: int = 0
    extraction_call_count: int = 0
    extraction_error_count: int = 0
    extraction_total_latency_ms: float = 0.0
    store_write_failure_count: int = 0
    last_notification_at: float | None = None

    def record_notification(self, error: bool = False) -> None:
        if error:
            self.notification_error_count += 1
            return
        self.notification_sent_count += 1
        self.last_notification_at = time.time()

    def record_extraction(self, latency_ms: float, error: bool = False) -> None:
        self.extraction_call_count += 1
        self.extraction_total_latency_ms += max(0.0, latency_ms)
        if error:
            self.extraction_error_count += 1

    def record_store_write_failure(self) -> None:
        self.store_write_failure_count += 1

    def snapshot(self) -> dict:
        avg_latency_ms = 0.0
        if self.extraction_call_count > 0:
            avg_latency_ms = self.extraction_total_latency_ms / self.extraction_call_count

        return {
            "notification_sent_count": self.notification_sent_count,
            "notification_error_count": self.notification_error_count,
            "extraction_call_count": self.extraction_call_count,
            "extraction_error_count": self.extraction_error_count,
            "extraction_avg_latency_ms": round(avg_latency_ms, 2),
            "store_write_failure_count": self.store_write_failure_count,
            "last_notification_at_epoch": self.last_notification_at,
            "last_notification_at_utc": (
                time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.last_notification_at))
                if self.last_notification_at is not None
                else None
            ),
        }


__all__ = ["RuntimeMetrics"]
