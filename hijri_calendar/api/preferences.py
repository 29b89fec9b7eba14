"""Calendar display mode (Masehi or Hijriyah) and its persistence."""
from __future__ import annotations

import threading
from enum import Enum
from typing import Dict, Optional, Protocol, Union

try:  # pragma: no cover - frappe is unavailable during tests
    import frappe  # type: ignore
except Exception:  # pragma: no cover - handled via MemoryStorage
    frappe = None  # type: ignore

from ..logger import get_logger, site_connected

__all__ = [
    "CalendarMode",
    "CalendarModeStore",
    "DEFAULT_MODE",
    "FrappeDefaultsStorage",
    "KeyValueStorage",
    "MODE_STORAGE_KEY",
    "MemoryStorage",
    "default_storage",
    "normalize_mode",
]

MODE_STORAGE_KEY = "calendar_mode"


class CalendarMode(str, Enum):
    """Display calendar; values are the strings written to storage."""

    CIVIL = "masehi"
    LUNAR = "hijriyah"

    def toggled(self) -> "CalendarMode":
        return CalendarMode.LUNAR if self is CalendarMode.CIVIL else CalendarMode.CIVIL


DEFAULT_MODE = CalendarMode.CIVIL


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Dictionary backed storage for tests and hosts without Frappe."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FrappeDefaultsStorage:
    """Storage on top of ``frappe.db`` defaults, optionally per user."""

    def __init__(self, user: Optional[str] = None) -> None:
        if not frappe:
            raise RuntimeError("frappe is not available")
        self.user = user

    def get(self, key: str) -> Optional[str]:
        if self.user:
            return frappe.db.get_default(key, user=self.user)  # type: ignore[attr-defined]
        return frappe.db.get_default(key)  # type: ignore[attr-defined]

    def set(self, key: str, value: str) -> None:
        if self.user:
            frappe.db.set_default(key, value, user=self.user)  # type: ignore[attr-defined]
            if hasattr(frappe, "defaults") and hasattr(frappe.defaults, "clear_cache"):
                frappe.defaults.clear_cache(user=self.user)  # type: ignore[attr-defined]
            return
        frappe.db.set_default(key, value)  # type: ignore[attr-defined]
        if hasattr(frappe, "clear_cache"):
            frappe.clear_cache()


_PROCESS_STORAGE = MemoryStorage()


def _session_user() -> Optional[str]:
    user = getattr(getattr(frappe, "session", None), "user", None)  # type: ignore[attr-defined]
    if not user or user == "Guest":
        return None
    return user


def default_storage() -> KeyValueStorage:
    """Return the session user's Frappe defaults inside a site, else process memory."""

    if site_connected():
        return FrappeDefaultsStorage(user=_session_user())
    return _PROCESS_STORAGE


def normalize_mode(value: Union[str, CalendarMode, None]) -> Optional[CalendarMode]:
    if isinstance(value, CalendarMode):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for mode in CalendarMode:
            if mode.value == normalized:
                return mode
    return None


def _require_mode(value: Union[str, CalendarMode]) -> CalendarMode:
    mode = normalize_mode(value)
    if mode is None:
        raise ValueError(
            "calendar mode must be one of: {}".format(
                ", ".join(item.value for item in CalendarMode)
            )
        )
    return mode


class CalendarModeStore:
    """Holds the active display mode and writes every change to storage.

    The stored value is read when the store is created and again before each
    toggle, so stores sharing one storage never undo each other's toggles.
    Storage failures are logged and otherwise ignored; the in-memory mode is
    kept when the stored value cannot be read.
    """

    def __init__(self, storage: KeyValueStorage, key: str = MODE_STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key
        self._lock = threading.Lock()
        self._mode = DEFAULT_MODE
        self._mode = self._refresh()

    def _refresh(self) -> CalendarMode:
        try:
            stored = self.storage.get(self.key)
        except Exception as exc:
            get_logger().warning("Could not read calendar mode %r: %s", self.key, exc)
            return self._mode
        return normalize_mode(stored) or self._mode

    def _persist(self, mode: CalendarMode) -> None:
        try:
            self.storage.set(self.key, mode.value)
        except Exception as exc:
            get_logger().warning("Could not store calendar mode %r: %s", mode.value, exc)

    @property
    def mode(self) -> CalendarMode:
        return self._mode

    def get_mode(self) -> CalendarMode:
        return self._mode

    def is_lunar(self) -> bool:
        return self._mode is CalendarMode.LUNAR

    def toggle_mode(self) -> CalendarMode:
        """Flip between Masehi and Hijriyah and persist the new mode."""

        with self._lock:
            self._mode = self._refresh().toggled()
            self._persist(self._mode)
            return self._mode

    def set_mode(self, value: Union[str, CalendarMode]) -> CalendarMode:
        mode = _require_mode(value)
        with self._lock:
            self._mode = mode
            self._persist(mode)
            return mode

    def as_context(self) -> Dict[str, object]:
        """Return a serialisable representation of the active mode."""

        return {
            "mode": self._mode.value,
            "is_hijri": self.is_lunar(),
            "storage_key": self.key,
        }
