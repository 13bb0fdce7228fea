"""Outbound relay to the workflow-automation webhooks."""

from .webhook import AutomationRelay, RelayResult

__all__ = ["AutomationRelay", "RelayResult"]
