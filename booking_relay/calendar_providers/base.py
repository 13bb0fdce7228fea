"""Abstract base class for calendar providers.

Defines the interface the HTTP handlers use to create, search and
delete events. Any calendar backend implements this ABC.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class CreatedEvent:
    """The subset of a created event that is returned to API clients."""

    id: str
    html_link: str = ""
    summary: str = ""
    start: Any = None
    end: Any = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: dict) -> "CreatedEvent":
        return cls(
            id=data.get("id", ""),
            html_link=data.get("htmlLink", ""),
            summary=data.get("summary", ""),
            start=data.get("start"),
            end=data.get("end"),
            raw=data,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "htmlLink": self.html_link,
            "summary": self.summary,
            "start": self.start,
            "end": self.end,
        }


class CalendarProvider(ABC):
    """Abstract calendar backend.

    Subclasses must implement event creation, search and deletion.
    ``calendar_id`` is optional everywhere; implementations fall back to
    their configured default.
    """

    @abstractmethod
    async def create_event(
        self, event_data: dict, calendar_id: str | None = None
    ) -> CreatedEvent:
        """Create a calendar event.

        Args:
            event_data: Event resource (``summary``, ``start``, ``end`` and
                optional extras such as ``description``).
            calendar_id: The calendar to create the event on.
        """

    @abstractmethod
    async def search_events(
        self,
        time_min: str,
        time_max: str,
        calendar_id: str | None = None,
    ) -> list[dict]:
        """Return events overlapping ``[time_min, time_max)`` (RFC 3339)."""

    @abstractmethod
    async def delete_event(
        self, event_id: str, calendar_id: str | None = None
    ) -> None:
        """Delete an event. Raises on failure."""
