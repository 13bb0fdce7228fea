"""Validated relay from an HTTP API to appointment webhooks and Google Calendar."""

__version__ = "0.1.0"
