"""Pydantic models for appointment booking and cancellation requests."""

from pydantic import BaseModel


class CancellationRequest(BaseModel):
    """Identifies an existing appointment to cancel."""

    email: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM

    @classmethod
    def from_payload(cls, data: dict) -> "CancellationRequest":
        """Build from an already-validated payload, normalising fields."""
        return cls(
            email=data["email"].strip().lower(),
            date=data["date"].strip(),
            time=data["time"].strip(),
        )

    def to_payload(self) -> dict:
        return self.model_dump()


class BookingRequest(CancellationRequest):
    """Data collected from the client to book an appointment."""

    name: str
    reason: str

    @classmethod
    def from_payload(cls, data: dict) -> "BookingRequest":
        return cls(
            name=data["name"].strip(),
            email=data["email"].strip().lower(),
            date=data["date"].strip(),
            time=data["time"].strip(),
            reason=data["reason"].strip(),
        )

    def to_payload(self) -> dict:
        """Field order matches what the booking webhook expects."""
        return {
            "name": self.name,
            "email": self.email,
            "date": self.date,
            "time": self.time,
            "reason": self.reason,
        }
