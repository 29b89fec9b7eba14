"""Calendar context shared by every date-bearing view of the application."""
from __future__ import annotations

import json
import threading
from datetime import date
from typing import Dict, List, Optional

try:  # pragma: no cover - frappe is unavailable during tests
    import frappe  # type: ignore
except Exception:  # pragma: no cover - endpoints stay plain functions
    frappe = None  # type: ignore

from ..logger import site_connected
from . import converter
from .converter import DateRange, GregorianInput, HijriDate
from .formatter import DateFormatter, DateInput, Options
from .preferences import CalendarMode, CalendarModeStore, KeyValueStorage, default_storage

__all__ = [
    "CalendarContext",
    "format_date",
    "get_calendar_mode",
    "get_context",
    "hijri_month_range",
    "reset_context",
    "set_context",
    "toggle_calendar_mode",
    "to_hijri_string",
]


class CalendarContext:
    """Owns the mode store and formatter; hands out the calendar helpers."""

    def __init__(self, store: CalendarModeStore) -> None:
        self.store = store
        self.formatter = DateFormatter(store)

    @classmethod
    def from_storage(cls, storage: KeyValueStorage) -> "CalendarContext":
        return cls(CalendarModeStore(storage))

    @property
    def mode(self) -> CalendarMode:
        return self.store.mode

    def toggle_mode(self) -> CalendarMode:
        return self.store.toggle_mode()

    def format_date(self, value: DateInput, options: Optional[Options] = None) -> str:
        return self.formatter.format_date(value, options)

    def format_date_range(
        self, start: DateInput, end: DateInput, options: Optional[Options] = None
    ) -> str:
        return self.formatter.format_date_range(start, end, options)

    def to_hijri(self, value: GregorianInput) -> HijriDate:
        return converter.to_hijri(value)

    def to_gregorian(self, day: int, month: int, year: int) -> date:
        return converter.to_gregorian(day, month, year)

    def get_hijri_month_range(self, month: int, year: int) -> DateRange:
        return converter.get_hijri_month_range(month, year)

    def get_hijri_months(self) -> List[str]:
        return converter.get_hijri_months()

    def hijri_month_filter(self, month: int, year: int) -> Dict[str, object]:
        """Translate a Hijri month selection into Gregorian report filters.

        ``bulan``/``tahun`` name the Gregorian month holding the middle of the
        Hijri month; ``date_from``/``date_to`` carry the exact bounds.
        """

        month_range = self.get_hijri_month_range(month, year)
        midpoint = month_range.midpoint()
        return {
            "bulan": midpoint.month,
            "tahun": midpoint.year,
            "date_from": month_range.start,
            "date_to": month_range.end,
            "is_hijri_filter": True,
        }

    def as_dict(self) -> Dict[str, object]:
        context = self.store.as_context()
        context["months"] = self.get_hijri_months()
        return context


_CONTEXT: Optional[CalendarContext] = None
_CONTEXT_LOCK = threading.Lock()


def get_context() -> CalendarContext:
    """Return the calendar context for the current caller.

    Inside a Frappe site every call builds a fresh context over the session
    user's defaults, since worker processes share nothing in memory. Outside
    Frappe one process-wide context is created on first use.
    """

    global _CONTEXT
    with _CONTEXT_LOCK:
        if _CONTEXT is None and site_connected():
            return CalendarContext.from_storage(default_storage())
        if _CONTEXT is None:
            _CONTEXT = CalendarContext.from_storage(default_storage())
        return _CONTEXT


def set_context(context: CalendarContext) -> CalendarContext:
    global _CONTEXT
    with _CONTEXT_LOCK:
        _CONTEXT = context
    return context


def reset_context() -> None:
    global _CONTEXT
    with _CONTEXT_LOCK:
        _CONTEXT = None


def get_calendar_mode() -> Dict[str, object]:
    """Return the active calendar mode."""

    return get_context().as_dict()


def toggle_calendar_mode() -> Dict[str, object]:
    """Switch between Masehi and Hijriyah and return the new context."""

    context = get_context()
    context.toggle_mode()
    return context.as_dict()


def format_date(value: DateInput, options: Optional[Options] = None) -> str:
    """Format ``value`` in the active calendar; usable as a Jinja filter."""

    if isinstance(options, str):  # form data from the HTTP endpoint
        options = json.loads(options) if options else None
    return get_context().format_date(value, options)


def hijri_month_range(month, year) -> Dict[str, object]:
    """Return the Gregorian bounds of a Hijri month as ISO strings."""

    month_range = get_context().get_hijri_month_range(int(month), int(year))
    return {
        "start": month_range.start.isoformat(),
        "end": month_range.end.isoformat(),
        "days": month_range.days,
        "approximate": month_range.approximate,
    }


def to_hijri_string(value: GregorianInput) -> str:
    """Jinja filter rendering ``value`` as ``YYYY-MM-DD`` in Hijri."""

    if not value:
        return ""
    return converter.to_hijri(value).isoformat()


def _maybe_whitelist(func):  # pragma: no cover - exercised in Frappe environments
    if frappe and hasattr(frappe, "whitelist"):
        return frappe.whitelist()(func)  # type: ignore[attr-defined]
    return func


get_calendar_mode = _maybe_whitelist(get_calendar_mode)
toggle_calendar_mode = _maybe_whitelist(toggle_calendar_mode)
format_date = _maybe_whitelist(format_date)
hijri_month_range = _maybe_whitelist(hijri_month_range)
