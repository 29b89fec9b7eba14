"""Hijri (Umm al-Qura) calendar support for Frappe applications."""

__version__ = "0.1.0"
