from __future__ import annotations

import time
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse

from remindly.config.settings import API_AUTH_TOKEN
from remindly.core.app import InvalidAppointmentError, RemindersApp
from remindly.logger import logger
from remindly.storage.appointment import NotFoundError
from remindly.world.extraction import ExtractionFailed

from .auth import make_auth_dependency
from .schemas import AppointmentIn, ExtractRequest, ExtractResponse


def create_app(reminders: RemindersApp, auth_token: str = API_AUTH_TOKEN) -> FastAPI:
    app = FastAPI(title="Remindly API", version="1.0.0")
    require_auth = make_auth_dependency(auth_token)
    started_at = time.time()

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> PlainTextResponse:
        return PlainTextResponse("ok")

    @app.get("/api/v1/health")
    async def api_health() -> dict[str, Any]:
        return {
            "status": "ok",
            "now_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "uptime_seconds": max(0.0, time.time() - started_at),
            **reminders.get_status(),
        }

    @app.get("/api/v1/appointments")
    async def list_appointments(request: Request) -> dict[str, Any]:
        await require_auth(request)
        state = reminders.ordered()
        return {
            "status": state.status,
            "items": [view.to_dict() for view in state.items],
            "error": state.error,
        }

    @app.post("/api/v1/appointments", status_code=201)
    async def create_appointment(request: Request, payload: AppointmentIn) -> dict[str, Any]:
        await require_auth(request)
        try:
            appointment = await reminders.add(payload.title, payload.date, payload.time)
        except InvalidAppointmentError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return appointment.to_dict()

    @app.put("/api/v1/appointments/{appointment_id}")
    async def update_appointment(request: Request, appointment_id: str, payload: AppointmentIn) -> dict[str, Any]:
        await require_auth(request)
        try:
            appointment = await reminders.update(appointment_id, payload.title, payload.date, payload.time)
        except InvalidAppointmentError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment.to_dict()

    @app.delete("/api/v1/appointments/{appointment_id}", status_code=204)
    async def delete_appointment(request: Request, appointment_id: str) -> None:
        await require_auth(request)
        await reminders.remove(appointment_id)

    @app.post("/api/v1/extract")
    async def extract(request: Request, payload: ExtractRequest) -> ExtractResponse:
        await require_auth(request)
        try:
            partial = await reminders.extract(payload.text)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except ExtractionFailed as e:
            logger.warning(f"Extraction unavailable: {e}")
            raise HTTPException(status_code=502, detail="Extraction service unavailable, please retry later")
        if partial is None:
            return ExtractResponse(understood=False)
        return ExtractResponse(understood=True, appointment=partial.to_dict())

    @app.get("/api/v1/permission")
    async def get_permission(request: Request) -> dict[str, str]:
        await require_auth(request)
        return {"state": reminders.permission_state.value}

    @app.post("/api/v1/permission/request")
    async def request_permission(request: Request) -> dict[str, str]:
        await require_auth(request)
        state = await reminders.request_permission()
        return {"state": state.value}

    @app.get("/api/v1/scheduler")
    async def scheduler_status(request: Request) -> dict[str, Any]:
        await require_auth(request)
        return reminders.scheduler.get_status()

    @app.get("/api/v1/metrics")
    async def get_metrics(request: Request) -> dict[str, Any]:
        await require_auth(request)
        return reminders.metrics.snapshot()

    return app
