"""Errors raised inside the Hijri calendar helpers."""
from __future__ import annotations


class HijriCalendarError(Exception):
    """Base class for calendar failures."""


class ConversionUnavailable(HijriCalendarError):
    """The Umm al-Qura conversion failed or produced unusable data."""


class SearchExhausted(HijriCalendarError):
    """A bounded day scan ran out of candidates without a match."""

    def __init__(self, message: str, *, checked: int = 0) -> None:
        super().__init__(message)
        self.checked = checked
