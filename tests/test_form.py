import asyncio

import pytest

from remindly.core.app import InvalidAppointmentError
from remindly.core.form import AppointmentForm

from conftest import FakeLLMClient


async def test_fill_merges_only_present_fields(make_app):
    llm = FakeLLMClient('{"title":null,"date":"2025-03-06","time":"09:15"}')
    app = await make_app(llm_client=llm)
    form = AppointmentForm(app)
    form.open()
    form.title = "Physio"

    assert await form.fill_from_text("physio tomorrow 9:15") is True
    assert (form.title, form.date, form.time) == ("Physio", "2025-03-06", "09:15")
    assert form.error == ""
    assert form.generating is False


async def test_unparseable_result_sets_rephrase_message(make_app):
    app = await make_app(llm_client=FakeLLMClient('{"title":"x","date":"soon","time":null}'))
    form = AppointmentForm(app)
    form.open()
    assert await form.fill_from_text("something") is False
    assert form.error == AppointmentForm.MSG_NOT_UNDERSTOOD


async def test_service_failure_sets_retry_message(make_app):
    app = await make_app(llm_client=FakeLLMClient(error=TimeoutError("upstream")))
    form = AppointmentForm(app)
    form.open()
    assert await form.fill_from_text("something") is False
    assert form.error == AppointmentForm.MSG_UNAVAILABLE


async def test_result_after_close_is_discarded(make_app):
    llm = FakeLLMClient('{"title":"Dentist","date":"2025-03-06","time":"10:00"}', delay=0.2)
    app = await make_app(llm_client=llm)
    form = AppointmentForm(app)
    form.open()

    pending = asyncio.create_task(form.fill_from_text("dentist"))
    await asyncio.sleep(0.01)
    form.close()

    assert await pending is False
    assert (form.title, form.date, form.time) == ("", "", "")


async def test_newer_request_supersedes_older(make_app):
    llm = FakeLLMClient('{"title":"Dentist","date":"2025-03-06","time":"10:00"}', delay=0.1)
    app = await make_app(llm_client=llm)
    form = AppointmentForm(app)
    form.open()

    first = asyncio.create_task(form.fill_from_text("dentist"))
    await asyncio.sleep(0.01)
    second = asyncio.create_task(form.fill_from_text("dentist at ten"))

    assert await first is False
    assert await second is True
    assert form.title == "Dentist"


async def test_save_requires_all_fields(make_app):
    app = await make_app()
    form = AppointmentForm(app)
    form.open()
    form.title = "Dentist"
    assert await form.save() is None
    assert form.error == AppointmentForm.MSG_REQUIRED
    assert app.list() == []


async def test_save_creates_then_edits(make_app):
    app = await make_app()
    form = AppointmentForm(app)
    form.open()
    form.title, form.date, form.time = "Dentist", "2025-03-06", "10:00"
    created = await form.save()
    assert form.is_open is False
    assert app.list() == [created]

    form.open(created)
    assert form.title == "Dentist"
    form.time = "11:30"
    edited = await form.save()
    assert edited.id == created.id
    assert app.get(created.id).time == "11:30"
    assert len(app.list()) == 1


async def test_save_reports_invalid_date(make_app):
    app = await make_app()
    form = AppointmentForm(app)
    form.open()
    form.title, form.date, form.time = "Dentist", "2025-02-30", "10:00"
    assert await form.save() is None
    assert form.error
    assert form.is_open


async def test_app_rejects_blank_title(make_app):
    app = await make_app()
    with pytest.raises(InvalidAppointmentError):
        await app.add("  ", "2025-03-06", "10:00")
