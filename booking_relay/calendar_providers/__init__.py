"""Calendar provider abstractions and implementations."""

from .base import CalendarProvider, CreatedEvent

__all__ = ["CalendarProvider", "CreatedEvent"]
