"""Data models for the relay layer."""

from .appointment import BookingRequest, CancellationRequest

__all__ = ["BookingRequest", "CancellationRequest"]
