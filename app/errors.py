"""
Error types raised inside the orchestration core.

Only ConfigurationError is meant to escape to a caller (it prevents a session
from starting). The others are caught at the tool, escalation or transcript
boundary and turned into logged events or structured error payloads.
"""

from typing import Any, Dict, List, Optional


class RealtimeAgentsError(Exception):
    """Base class for all application errors."""


class ToolValidationError(RealtimeAgentsError):
    """Tool arguments failed their parameter schema."""

    def __init__(self, tool_name: str, details: Optional[List[Dict[str, Any]]] = None):
        self.tool_name = tool_name
        self.details = details or []
        super().__init__(f"Invalid arguments for tool '{tool_name}'")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error": f"Invalid arguments for {self.tool_name}",
            "details": self.details,
        }


class TransportError(RealtimeAgentsError):
    """An upstream HTTP call failed or returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class OrderingError(RealtimeAgentsError):
    """A transcript mutation referenced an id that was never inserted."""

    def __init__(self, item_id: str, operation: str):
        self.item_id = item_id
        self.operation = operation
        super().__init__(f"{operation} for unknown transcript item '{item_id}'")


class ConfigurationError(RealtimeAgentsError):
    """Agent graph or scenario selection is invalid."""


class EscalationExhausted(RealtimeAgentsError):
    """The supervisor loop hit its iteration or time bound without an answer."""

    def __init__(self, reason: str, iterations: int):
        self.reason = reason
        self.iterations = iterations
        super().__init__(f"Supervisor escalation exhausted ({reason}) after {iterations} iterations")
