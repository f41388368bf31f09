"""
a42z Judge Gateway - Error Taxonomy

Every failure the gateway can report carries the HTTP status it is surfaced
with, a short public message and optional details. The FastAPI layer turns
these into the uniform ``{success: false, error, details}`` envelope.

ConfigurationError is the odd one out: the dispatcher catches it itself and
downgrades it into a successful result, so it never reaches a caller.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class JudgeGatewayError(RuntimeError):
    """Base class for all gateway errors."""

    status_code: int = 500
    public_message: str = "Judge gateway error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[str] = None):
        self.message = message or self.public_message
        self.details = details
        super().__init__(self.message)

    def to_envelope(self) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {"success": False, "error": self.message}
        if self.details is not None:
            envelope["details"] = self.details
        return envelope


class MissingField(JudgeGatewayError):
    status_code = 400
    public_message = "Missing required field"

    def __init__(self, field_name: str, message: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message or f"{field_name} is required")


class InvalidPayload(JudgeGatewayError):
    status_code = 400
    public_message = "Invalid JSON payload"


class UnknownJudge(JudgeGatewayError):
    status_code = 400
    public_message = "Unknown judge"

    def __init__(self, judge_id: str):
        self.judge_id = judge_id
        super().__init__(f"Unknown judge type: {judge_id}")


class UpstreamError(JudgeGatewayError):
    """The upstream service answered with a non-2xx status."""

    public_message = "Upstream judge service error"

    def __init__(self, status_code: int, body: str):
        self.status_code = int(status_code)
        self.body = body
        super().__init__(f"Dify API Error: {self.status_code}", details=body)


class TransportError(JudgeGatewayError):
    """No response from upstream (DNS, connect, read failure...)."""

    status_code = 500
    public_message = "Failed to reach judge service"

    def __init__(self, details: Optional[str] = None):
        super().__init__(self.public_message, details=details)


class ConfigurationError(JudgeGatewayError):
    """Upstream reported that its model provider credentials are missing."""

    public_message = "Judge backend is not configured"


class NotFound(JudgeGatewayError):
    status_code = 404
    public_message = "Data not found"

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = key
        super().__init__(message or self.public_message)

    def to_envelope(self) -> Dict[str, Any]:
        return {"error": self.message}


class IllegalStateTransition(JudgeGatewayError):
    status_code = 500
    public_message = "Illegal request state transition"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move request from '{current}' to '{target}'")
