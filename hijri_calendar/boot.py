"""Hook implementations that integrate the Hijri calendar with Frappe."""
from __future__ import annotations

from .api import context


def boot_session(bootinfo):
    """Inject the active calendar mode into the boot payload."""

    payload = context.get_context().as_dict()
    if isinstance(bootinfo, dict):
        bootinfo.setdefault("hijri_calendar", payload)
    else:  # ``bootinfo`` is typically a ``frappe._dict``
        setattr(bootinfo, "hijri_calendar", payload)
