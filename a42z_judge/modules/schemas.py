"""
a42z Judge Gateway - Core Data Structures (Pydantic Schemas)

Defines the models that flow through the dispatch layer:
- AnalysisRequest: normalized inbound request for one judge
- AnalysisResult: normalized outcome of one upstream call
- RequestState: lifecycle of a request with its legal transitions
- DifyProxyRequest: body of the generic proxy route
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import IllegalStateTransition, JudgeGatewayError


ANONYMOUS_USER = "anonymous"


# =============================================================================
# REQUEST LIFECYCLE
# =============================================================================


class RequestState(str, Enum):
    """Lifecycle of one judge request."""

    RECEIVED = "received"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    DEGRADED = "degraded"  # configuration-error fallback, exposed as success
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    @property
    def is_success(self) -> bool:
        return self in (RequestState.COMPLETED, RequestState.DEGRADED)


ALLOWED_TRANSITIONS: Dict[RequestState, FrozenSet[RequestState]] = {
    RequestState.RECEIVED: frozenset({RequestState.DISPATCHED, RequestState.FAILED}),
    RequestState.DISPATCHED: frozenset({RequestState.COMPLETED, RequestState.DEGRADED, RequestState.FAILED}),
    RequestState.COMPLETED: frozenset(),
    RequestState.DEGRADED: frozenset(),
    RequestState.FAILED: frozenset(),
}


def advance(current: RequestState, target: RequestState) -> RequestState:
    """Return ``target`` if the transition is legal, else raise."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise IllegalStateTransition(current.value, target.value)
    return target


# =============================================================================
# INBOUND
# =============================================================================


def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class AnalysisRequest(BaseModel):
    """
    Normalized inbound request.

    Wire names follow the frontend (``repo_url``, ``repo_pdf``, ``user_id``).
    Any other inbound attribute is kept in ``extra`` rather than dropped, so
    newer clients can send fields this service does not know yet.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    judge_id: str
    repository_url: Optional[str] = Field(None, alias="repo_url")
    document_ref: Optional[str] = Field(None, alias="repo_pdf")
    user_id: Optional[str] = None
    timestamp: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("repository_url", "document_ref", "user_id", "timestamp", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Optional[str]:
        return _blank_to_none(value)

    @classmethod
    def from_payload(cls, judge_id: str, payload: Mapping[str, Any]) -> "AnalysisRequest":
        known = {"repo_url", "repo_pdf", "user_id", "timestamp"}
        extra = {k: v for k, v in payload.items() if k not in known and k != "judge_id"}
        timestamp = payload.get("timestamp")
        if isinstance(timestamp, (dict, list)):
            # Structured timestamps are echoed back untouched.
            extra["timestamp"] = timestamp
            timestamp = None
        return cls(
            judge_id=judge_id,
            repo_url=payload.get("repo_url"),
            repo_pdf=payload.get("repo_pdf"),
            user_id=payload.get("user_id"),
            timestamp=timestamp,
            extra=extra,
        )

    @property
    def has_artifact(self) -> bool:
        return bool(self.repository_url or self.document_ref)

    @property
    def effective_user(self) -> str:
        return self.user_id or ANONYMOUS_USER

    def inputs(self) -> Dict[str, str]:
        """Named parameters forwarded to the upstream workflow."""
        inputs: Dict[str, str] = {}
        if self.repository_url:
            inputs["repo_url"] = self.repository_url
        if self.document_ref:
            inputs["repo_pdf"] = self.document_ref
        return inputs

    def echo(self) -> Dict[str, Any]:
        """The request as received, in wire names."""
        echo: Dict[str, Any] = dict(self.extra)
        echo.update(
            {
                "judge_id": self.judge_id,
                "repo_url": self.repository_url,
                "repo_pdf": self.document_ref,
                "user_id": self.effective_user,
            }
        )
        if self.timestamp:
            echo["timestamp"] = self.timestamp
        return echo


class DifyProxyRequest(BaseModel):
    """Body of ``POST /api/dify-proxy``."""

    model_config = ConfigDict(populate_by_name=True)

    judge_type: Optional[str] = Field(None, alias="judgeType")
    message: Optional[str] = None
    inputs: Dict[str, Any] = Field(default_factory=dict)
    user: Optional[str] = None

    @field_validator("inputs", mode="before")
    @classmethod
    def _null_inputs(cls, value: Any) -> Any:
        return {} if value is None else value


# =============================================================================
# OUTBOUND
# =============================================================================


ENVELOPE_FIELDS = frozenset(
    {"success", "error", "details", "status_code", "degraded", "source_judge_id", "request_id"}
)


class AnalysisResult(BaseModel):
    """
    Normalized outcome of one dispatch.

    Upstream fields (``answer``, ``conversation_id``, ``message_id``,
    ``metadata`` and anything else the platform returns) are passed through
    unchanged, whatever their type; extra attributes are allowed so updates
    can merge arbitrary fields into a stored result.
    """

    model_config = ConfigDict(extra="allow")

    success: bool
    answer: Any = None
    conversation_id: Any = None
    message_id: Any = None
    metadata: Any = None

    error: Optional[str] = None
    details: Any = None
    status_code: Optional[int] = None
    degraded: bool = False

    source_judge_id: Optional[str] = None
    request_id: Optional[str] = None

    @classmethod
    def from_upstream(cls, body: Mapping[str, Any], judge_id: str) -> "AnalysisResult":
        return cls.model_validate({**body, "success": True, "source_judge_id": judge_id})

    @classmethod
    def fallback(cls, judge_id: str, answer: str) -> "AnalysisResult":
        return cls(success=True, answer=answer, degraded=True, source_judge_id=judge_id)

    @classmethod
    def failure(cls, exc: JudgeGatewayError, judge_id: Optional[str] = None) -> "AnalysisResult":
        return cls(
            success=False,
            error=exc.message,
            details=exc.details,
            status_code=exc.status_code,
            source_judge_id=judge_id,
        )

    def payload(self) -> Dict[str, Any]:
        """The ``data`` part of the response envelope."""
        return self.model_dump(exclude=set(ENVELOPE_FIELDS), exclude_none=True)

    def merged(self, partial: Mapping[str, Any]) -> "AnalysisResult":
        """Shallow merge, last write wins per field. Merged values are stored as given."""
        return type(self).model_construct(**{**self.model_dump(), **dict(partial)})
