"""Date formatting that follows the active calendar mode."""
from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Mapping, Optional, Union

from .converter import GregorianInput, coerce_gregorian, to_hijri
from .preferences import CalendarModeStore

__all__ = [
    "DEFAULT_OPTIONS",
    "DateFormatter",
    "EMPTY_DATE",
    "INDONESIAN_MONTHS",
    "format_gregorian",
    "format_hijri",
]

EMPTY_DATE = "-"
OPEN_END = "..."

INDONESIAN_MONTHS = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)
INDONESIAN_MONTHS_SHORT = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "Mei",
    "Jun",
    "Jul",
    "Agu",
    "Sep",
    "Okt",
    "Nov",
    "Des",
)
# Monday first, matching ``date.weekday()``
INDONESIAN_WEEKDAYS = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")
INDONESIAN_WEEKDAYS_SHORT = ("Sen", "Sel", "Rab", "Kam", "Jum", "Sab", "Min")

DEFAULT_OPTIONS: Dict[str, str] = {"day": "numeric", "month": "long", "year": "numeric"}

_ALLOWED_OPTIONS = {
    "weekday": {"long", "short"},
    "day": {"numeric", "2-digit"},
    "month": {"long", "short", "numeric", "2-digit"},
    "year": {"numeric", "2-digit"},
}

Options = Mapping[str, Optional[str]]
DateInput = Union[str, date, datetime, None]


def _merge_options(options: Optional[Options]) -> Dict[str, str]:
    merged: Dict[str, Optional[str]] = {**DEFAULT_OPTIONS, **(options or {})}
    resolved: Dict[str, str] = {}
    for key, value in merged.items():
        if key not in _ALLOWED_OPTIONS:
            raise ValueError(f"Unsupported date format option: {key!r}")
        if value is None:
            continue
        if value not in _ALLOWED_OPTIONS[key]:
            raise ValueError(f"Unsupported value {value!r} for date format option {key!r}")
        resolved[key] = value
    return resolved


def _parse(value: DateInput) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        return date(*coerce_gregorian(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None


def _number(value: int, style: str) -> str:
    return f"{value:02d}" if style == "2-digit" else str(value)


def _year(value: int, style: str) -> str:
    return f"{value % 100:02d}" if style == "2-digit" else str(value)


def format_gregorian(value: date, options: Optional[Options] = None) -> str:
    """Format ``value`` the way the ``id-ID`` locale does.

    Textual months give ``"Senin, 11 Maret 2024"``; numeric months give
    ``"11/3/2024"``.
    """

    resolved = _merge_options(options)
    month_style = resolved.get("month")
    textual = month_style in ("long", "short")

    parts = []
    if "day" in resolved:
        parts.append(_number(value.day, resolved["day"]))
    if month_style == "long":
        parts.append(INDONESIAN_MONTHS[value.month - 1])
    elif month_style == "short":
        parts.append(INDONESIAN_MONTHS_SHORT[value.month - 1])
    elif month_style:
        parts.append(_number(value.month, month_style))
    if "year" in resolved:
        parts.append(_year(value.year, resolved["year"]))

    text = (" " if textual else "/").join(parts)

    weekday_style = resolved.get("weekday")
    if weekday_style:
        names = INDONESIAN_WEEKDAYS if weekday_style == "long" else INDONESIAN_WEEKDAYS_SHORT
        weekday = names[value.weekday()]
        text = f"{weekday}, {text}" if text else weekday
    return text


def format_hijri(value: GregorianInput) -> str:
    hijri = to_hijri(value)
    return f"{hijri.day} {hijri.month_name} {hijri.year} H"


class DateFormatter:
    """Render dates in whichever calendar ``store`` currently selects."""

    def __init__(self, store: CalendarModeStore) -> None:
        self.store = store

    def format_date(self, value: DateInput, options: Optional[Options] = None) -> str:
        parsed = _parse(value)
        if parsed is None:
            return EMPTY_DATE
        if self.store.is_lunar():
            return format_hijri(parsed)
        return format_gregorian(parsed, options)

    def format_date_range(
        self,
        start: DateInput,
        end: DateInput,
        options: Optional[Options] = None,
    ) -> str:
        start_text = self.format_date(start, options)
        end_text = self.format_date(end, options)
        if start_text == EMPTY_DATE:
            start_text = None
        if end_text == EMPTY_DATE:
            end_text = None
        if start_text and end_text:
            return f"{start_text} - {end_text}"
        if start_text:
            return f"{start_text} - {OPEN_END}"
        if end_text:
            return f"{OPEN_END} - {end_text}"
        return EMPTY_DATE
