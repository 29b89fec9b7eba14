"""Server-side helpers exposed by the Hijri calendar package."""

from . import context, converter, formatter, preferences

__all__ = [
    "context",
    "converter",
    "formatter",
    "preferences",
]
