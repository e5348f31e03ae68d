"""Route group exports."""

from . import health, notifications

__all__ = ["health", "notifications"]
