"""Logger lookup shared by the calendar helpers."""
from __future__ import annotations

import logging

try:  # pragma: no cover - frappe is unavailable during tests
    import frappe  # type: ignore
except Exception:  # pragma: no cover - plain logging is used instead
    frappe = None  # type: ignore

LOGGER_NAME = "hijri_calendar"


def site_connected() -> bool:
    if not frappe:
        return False
    local = getattr(frappe, "local", None)
    return bool(getattr(local, "site", None))


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Return the Frappe site logger when running inside a site."""

    if site_connected() and hasattr(frappe, "logger"):
        return frappe.logger(name)  # type: ignore[attr-defined]
    return logging.getLogger(name)
