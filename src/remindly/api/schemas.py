from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class AppointmentIn(BaseModel):
    title: str = Field(..., min_length=1)
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM, 24-hour local time")


class ExtractRequest(BaseModel):
    text: str = Field(..., min_length=1)


class ExtractResponse(BaseModel):
    understood: bool
    appointment: Optional[dict] = None
