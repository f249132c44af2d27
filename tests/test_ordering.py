from datetime import datetime, timedelta

from remindly.core.app import RemindersApp
from remindly.datamodel import Appointment
from remindly.storage.appointment import APPOINTMENTS_KEY
from remindly.world.ordering import list_state, ordered_view

NOW = datetime(2025, 3, 5, 12, 0)


def _at(id: str, when: datetime) -> Appointment:
    return Appointment(id=id, title=id, date=when.strftime("%Y-%m-%d"), time=when.strftime("%H:%M"))


def test_sorted_ascending_by_occurrence():
    appointments = [
        _at("in-2h", NOW + timedelta(hours=2)),
        _at("1h-ago", NOW - timedelta(hours=1)),
        _at("in-1d", NOW + timedelta(days=1)),
    ]
    views = ordered_view(appointments, NOW)
    assert [v.appointment.id for v in views] == ["1h-ago", "in-2h", "in-1d"]
    assert [v.is_past for v in views] == [True, False, False]


def test_empty_date_and_time_sink_to_bottom_and_are_not_past():
    blank = Appointment(id="blank", title="Someday", date="", time="")
    appointments = [blank, _at("past", NOW - timedelta(days=30)), _at("future", NOW + timedelta(days=30))]
    views = ordered_view(appointments, NOW)
    assert [v.appointment.id for v in views] == ["past", "future", "blank"]
    assert views[-1].is_past is False
    assert views[-1].occurs_at is None
    assert (views[-1].display_date, views[-1].display_time) == ("No date", "No time")


def test_malformed_values_keep_insertion_order_at_bottom():
    appointments = [
        Appointment(id="bad-day", title="x", date="2025-02-30", time="10:00"),
        Appointment(id="bad-shape", title="y", date="03/05/2025", time="14:30"),
        _at("ok", NOW),
    ]
    views = ordered_view(appointments, NOW)
    assert [v.appointment.id for v in views] == ["ok", "bad-day", "bad-shape"]
    assert views[1].display_date == "Invalid date"
    assert not views[1].is_past


def test_occurrence_equal_to_now_is_not_past():
    views = ordered_view([_at("now", NOW)], NOW)
    assert views[0].is_past is False
    assert views[0].appointment.is_due(NOW)


def test_display_strings():
    view = ordered_view([Appointment(id="a", title="Dentist", date="2025-03-05", time="14:30")], NOW)[0]
    assert view.display_date == "Wednesday, March 5, 2025"
    assert view.display_time == "02:30 PM"
    assert view.to_dict()["occurs_at"] == "2025-03-05T14:30"


def test_list_state_distinguishes_empty_from_ready():
    assert list_state([], NOW).status == "empty"
    ready = list_state([_at("a", NOW)], NOW)
    assert ready.status == "ready"
    assert len(ready.items) == 1


async def test_app_reports_loading_before_start(kv, clock):
    app = RemindersApp(kv=kv, now=clock)
    assert app.ordered().status == "loading"
    await app.start(run_scheduler=False)
    assert app.ordered().status == "empty"


async def test_app_reports_error_for_unreadable_saved_data(kv, clock):
    await kv.set(APPOINTMENTS_KEY, "{not valid json")
    app = RemindersApp(kv=kv, now=clock)
    await app.start(run_scheduler=False)

    state = app.ordered()
    assert state.status == "error"
    assert state.items == []
    assert state.error

    await app.add("Dentist", "2025-03-06", "10:00")
    assert app.ordered().status == "ready"


async def test_stored_record_without_time_is_listed_last(kv, clock):
    await kv.set(APPOINTMENTS_KEY, (
        '[{"id": "b", "title": "Gym", "date": "2025-03-05", "time": null},'
        ' {"id": "a", "title": "Dentist", "date": "2025-03-06", "time": "10:00"}]'
    ))
    app = RemindersApp(kv=kv, now=clock)
    await app.start(run_scheduler=False)

    state = app.ordered()
    assert state.status == "ready"
    assert [v.appointment.id for v in state.items] == ["a", "b"]
    assert (state.items[1].display_date, state.items[1].display_time) == ("No date", "No time")
