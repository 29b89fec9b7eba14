"""Gregorian ↔ Hijri (Umm al-Qura) conversion helpers."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Tuple, Union

from hijridate import Gregorian

from ..exceptions import ConversionUnavailable, SearchExhausted
from ..logger import get_logger

__all__ = [
    "ANCHOR_GREGORIAN",
    "ANCHOR_HIJRI",
    "DateRange",
    "FALLBACK_HIJRI",
    "HIJRI_MONTHS",
    "HijriDate",
    "coerce_gregorian",
    "get_hijri_month_range",
    "get_hijri_months",
    "scan_until",
    "to_gregorian",
    "to_hijri",
]

GregorianInput = Union[str, date, datetime, Iterable[int]]

HIJRI_MONTHS = (
    "Muharram",
    "Safar",
    "Rabiul Awal",
    "Rabiul Akhir",
    "Jumadil Awal",
    "Jumadil Akhir",
    "Rajab",
    "Sya'ban",
    "Ramadhan",
    "Syawal",
    "Dzulqa'dah",
    "Dzulhijjah",
)

# 1 Ramadhan 1445 H
ANCHOR_GREGORIAN = date(2024, 3, 11)
ANCHOR_HIJRI = (1445, 9)

AVERAGE_YEAR_DAYS = 354
AVERAGE_MONTH_DAYS = 29
END_JUMP_DAYS = 27

EXACT_SCAN_LEAD = 20
# the approximate pass restarts 15 days before the estimate
APPROXIMATE_SCAN_LEAD = 15
SCAN_LIMIT = 40
END_SCAN_LIMIT = 10
WIDE_SEARCH_SPAN = 400


@dataclass(frozen=True)
class HijriDate:
    """Immutable Hijri date; ``month_name`` always comes from ``HIJRI_MONTHS``."""

    year: int
    month: int
    day: int
    is_fallback: bool = False

    def __post_init__(self) -> None:
        if not (1 <= self.month <= 12):
            raise ValueError("month must be in 1..12 for Hijri calendar")
        if not (1 <= self.day <= 30):
            raise ValueError("day must be in 1..30 for Hijri calendar")

    @property
    def month_name(self) -> str:
        return HIJRI_MONTHS[self.month - 1]

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.year, self.month, self.day

    def isoformat(self, sep: str = "-") -> str:
        return f"{self.year:04d}{sep}{self.month:02d}{sep}{self.day:02d}"

    def __str__(self) -> str:
        return f"{self.day} {self.month_name} {self.year} H"


FALLBACK_HIJRI = HijriDate(1445, 1, 1, is_fallback=True)


@dataclass(frozen=True)
class DateRange:
    """Gregorian days covering one Hijri month, both ends inclusive."""

    start: date
    end: date
    approximate: bool = False

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def midpoint(self) -> date:
        return self.start + timedelta(days=(self.end - self.start).days // 2)

    def __contains__(self, value: object) -> bool:
        if isinstance(value, datetime):
            value = value.date()
        if not isinstance(value, date):
            return False
        return self.start <= value <= self.end


def _parse_string(value: str) -> Tuple[int, int, int]:
    text = value.strip()
    if "T" in text or " " in text:
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Unsupported Gregorian date string: {value!r}") from exc
        return parsed.year, parsed.month, parsed.day
    tokens = text.replace("/", "-").split("-")
    if len(tokens) != 3:
        raise ValueError(f"Unsupported Gregorian date string: {value!r}")
    try:
        return tuple(int(part) for part in tokens)  # type: ignore[return-value]
    except ValueError as exc:
        raise ValueError(f"Unsupported Gregorian date string: {value!r}") from exc


def coerce_gregorian(value: GregorianInput) -> Tuple[int, int, int]:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.year, value.month, value.day
    if isinstance(value, str):
        return _parse_string(value)
    try:
        year, month, day = value  # type: ignore[misc]
    except Exception as exc:
        raise TypeError("Expected a date, string, or iterable of three integers") from exc
    return int(year), int(month), int(day)


def _convert(value: GregorianInput) -> HijriDate:
    try:
        gy, gm, gd = coerce_gregorian(value)
        hijri = Gregorian(gy, gm, gd).to_hijri()
        return HijriDate(int(hijri.year), int(hijri.month), int(hijri.day))
    except (OverflowError, ValueError, TypeError) as exc:
        raise ConversionUnavailable(f"Cannot convert {value!r} to Hijri: {exc}") from exc


def to_hijri(value: GregorianInput) -> HijriDate:
    """Convert a Gregorian date to Hijri, degrading to ``FALLBACK_HIJRI``.

    Rendering code calls this for every date it shows, so a failed conversion
    never raises. The fallback is flagged with ``is_fallback`` and logged.
    """

    try:
        return _convert(value)
    except ConversionUnavailable as exc:
        get_logger().warning("Hijri conversion unavailable, using fallback: %s", exc)
        return FALLBACK_HIJRI


def scan_until(
    start: date,
    predicate: Callable[[date], bool],
    limit: int,
    step: int = 1,
) -> date:
    """Return the first date from ``start`` satisfying ``predicate``.

    At most ``limit`` candidates are checked, ``step`` days apart.
    """

    current = start
    for _ in range(limit):
        if predicate(current):
            return current
        current += timedelta(days=step)
    raise SearchExhausted(
        f"No match within {limit} days from {start.isoformat()}", checked=limit
    )


def _month_key(hijri: HijriDate) -> Tuple[int, int]:
    return hijri.year, hijri.month


def _estimate_start(month: int, year: int) -> date:
    anchor_year, anchor_month = ANCHOR_HIJRI
    offset = (year - anchor_year) * AVERAGE_YEAR_DAYS + (month - anchor_month) * AVERAGE_MONTH_DAYS
    try:
        return ANCHOR_GREGORIAN + timedelta(days=offset)
    except OverflowError as exc:
        raise ValueError(f"Hijri year {year} is outside the supported range") from exc


def _bisect_month_start(month: int, year: int, seed: date) -> date:
    """Find day 1 of the month by bisection around ``seed``.

    Covers months the linear scan misses when the average-length estimate has
    drifted far from the anchor.
    """

    target = (year, month)
    low, high = -WIDE_SEARCH_SPAN, WIDE_SEARCH_SPAN
    while low < high:
        middle = (low + high) // 2
        if _month_key(to_hijri(seed + timedelta(days=middle))) < target:
            low = middle + 1
        else:
            high = middle
    candidate = seed + timedelta(days=low)
    if to_hijri(candidate) != HijriDate(year, month, 1):
        raise SearchExhausted(f"Bisection found no first day for {month}/{year}")
    return candidate


def _find_month_start(month: int, year: int) -> Tuple[date, bool]:
    logger = get_logger()
    seed = _estimate_start(month, year)
    first_day = HijriDate(year, month, 1)

    try:
        start = scan_until(
            seed - timedelta(days=EXACT_SCAN_LEAD),
            lambda day: to_hijri(day) == first_day,
            SCAN_LIMIT,
        )
        return start, False
    except SearchExhausted:
        logger.debug("Exact scan missed %s/%s, bisecting", month, year)

    try:
        return _bisect_month_start(month, year, seed), False
    except SearchExhausted:
        logger.debug("Bisection missed %s/%s, accepting any day of the month", month, year)

    try:
        start = scan_until(
            seed - timedelta(days=APPROXIMATE_SCAN_LEAD),
            lambda day: _month_key(to_hijri(day)) == (year, month),
            SCAN_LIMIT,
        )
    except SearchExhausted:
        logger.warning("No Hijri day found for %s/%s, using estimate %s", month, year, seed)
        return seed, True
    logger.warning("Approximate start %s used for Hijri month %s/%s", start, month, year)
    return start, True


def get_hijri_month_range(month: int, year: int) -> DateRange:
    """Return the Gregorian days that make up Hijri ``month`` of ``year``."""

    if not (1 <= month <= 12):
        raise ValueError("month must be in 1..12 for Hijri calendar")

    start, approximate = _find_month_start(month, year)

    end = start + timedelta(days=END_JUMP_DAYS)
    for _ in range(END_SCAN_LIMIT):
        following = end + timedelta(days=1)
        if _month_key(to_hijri(following)) != (year, month):
            break
        end = following

    return DateRange(start, end, approximate)


def to_gregorian(day: int, month: int, year: int) -> date:
    """Return the Gregorian date of a Hijri day.

    ``day`` is not checked against the month length; day 30 of a 29-day month
    lands on the first day of the following month.
    """

    start = get_hijri_month_range(month, year).start
    return start + timedelta(days=day - 1)


def get_hijri_months() -> List[str]:
    return list(HIJRI_MONTHS)
