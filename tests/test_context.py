from datetime import date

import pytest

from hijri_calendar import boot
from hijri_calendar.api import context
from hijri_calendar.api.context import CalendarContext
from hijri_calendar.api.converter import HijriDate
from hijri_calendar.api.preferences import MODE_STORAGE_KEY, CalendarMode, MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def calendar(storage):
    installed = context.set_context(CalendarContext.from_storage(storage))
    yield installed
    context.reset_context()


def test_context_exposes_calendar_helpers(calendar):
    assert calendar.mode is CalendarMode.CIVIL
    assert calendar.to_hijri("2024-03-11") == HijriDate(1445, 9, 1)
    assert calendar.to_gregorian(1, 9, 1445) == date(2024, 3, 11)
    assert calendar.get_hijri_month_range(9, 1445).end == date(2024, 4, 9)
    assert calendar.get_hijri_months()[8] == "Ramadhan"


def test_context_toggle_changes_formatting(calendar, storage):
    assert calendar.format_date("2024-03-11") == "11 Maret 2024"
    assert calendar.toggle_mode() is CalendarMode.LUNAR
    assert calendar.format_date("2024-03-11") == "1 Ramadhan 1445 H"
    assert storage.get(MODE_STORAGE_KEY) == "hijriyah"


def test_hijri_month_filter_uses_midpoint(calendar):
    filters = calendar.hijri_month_filter(9, 1445)
    assert filters == {
        "bulan": 3,
        "tahun": 2024,
        "date_from": date(2024, 3, 11),
        "date_to": date(2024, 4, 9),
        "is_hijri_filter": True,
    }


def test_endpoints_use_installed_context(calendar):
    assert context.get_calendar_mode()["mode"] == "masehi"
    toggled = context.toggle_calendar_mode()
    assert toggled["mode"] == "hijriyah"
    assert toggled["is_hijri"] is True
    assert toggled["months"][0] == "Muharram"
    assert context.format_date("2024-03-11") == "1 Ramadhan 1445 H"


def test_format_date_endpoint_accepts_json_options(calendar):
    assert context.format_date("2024-03-11", '{"month": "short"}') == "11 Mar 2024"
    assert context.format_date("2024-03-11", "") == "11 Maret 2024"


def test_hijri_month_range_endpoint_accepts_strings(calendar):
    assert context.hijri_month_range("9", "1444") == {
        "start": "2023-03-23",
        "end": "2023-04-20",
        "days": 29,
        "approximate": False,
    }


def test_to_hijri_string_filter():
    assert context.to_hijri_string(date(2024, 3, 11)) == "1445-09-01"
    assert context.to_hijri_string(None) == ""


def test_get_context_is_created_lazily():
    context.reset_context()
    first = context.get_context()
    assert first is context.get_context()
    context.reset_context()
    assert context.get_context() is not first
    context.reset_context()


def test_boot_session_injects_mode(calendar):
    bootinfo = {}
    boot.boot_session(bootinfo)
    assert bootinfo["hijri_calendar"]["mode"] == "masehi"


def test_boot_session_supports_attribute_payloads(calendar):
    class BootInfo:
        pass

    bootinfo = BootInfo()
    calendar.toggle_mode()
    boot.boot_session(bootinfo)
    assert bootinfo.hijri_calendar["is_hijri"] is True


def test_contexts_sharing_storage_do_not_lose_toggles(storage):
    first = CalendarContext.from_storage(storage)
    second = CalendarContext.from_storage(storage)

    first.toggle_mode()
    second.toggle_mode()

    assert storage.get(MODE_STORAGE_KEY) == "masehi"
    assert second.mode is CalendarMode.CIVIL


def test_get_context_inside_site_is_built_per_call(monkeypatch):
    shared = MemoryStorage({MODE_STORAGE_KEY: "hijriyah"})
    context.reset_context()
    monkeypatch.setattr(context, "site_connected", lambda: True)
    monkeypatch.setattr(context, "default_storage", lambda: shared)

    first = context.get_context()
    assert first.mode is CalendarMode.LUNAR
    assert context.get_context() is not first

    context.toggle_calendar_mode()
    assert shared.get(MODE_STORAGE_KEY) == "masehi"
    assert context.get_calendar_mode()["mode"] == "masehi"
    context.reset_context()
