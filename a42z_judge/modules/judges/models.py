"""
Judge Registry - Data Models

Static description of one downstream analysis backend ("judge").
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


DEFAULT_QUERY_TEMPLATE = (
    "Please analyze this hackathon project. "
    "GitHub repository: {repo_url}. Supporting document: {repo_pdf}."
)

NOT_PROVIDED = "not provided"


@dataclass(frozen=True)
class JudgeConfig:
    """
    Configuration for one judge.

    The credential is the judge's upstream bearer token. It is excluded from
    ``repr`` and from ``to_public_dict`` so it never reaches logs or callers.
    """

    id: str                                   # Short stable key ("business", "paul")
    display_name: str                         # Human-readable label
    credential: str = field(default="", repr=False)
    query_template: str = DEFAULT_QUERY_TEMPLATE
    requires_repository: bool = True          # repo_url mandatory for this judge
    persist: bool = False                     # Archive finished analyses
    description: str = ""

    @property
    def has_credential(self) -> bool:
        return bool(self.credential)

    def render_query(self, repo_url: Optional[str] = None, repo_pdf: Optional[str] = None) -> str:
        """Fill the persona template with the request's artifacts."""
        return self.query_template.format(
            repo_url=repo_url or NOT_PROVIDED,
            repo_pdf=repo_pdf or NOT_PROVIDED,
        )

    def with_overrides(self, data: Dict[str, Any]) -> "JudgeConfig":
        """Return a copy with the known keys of ``data`` applied."""
        known = {
            k: v
            for k, v in data.items()
            if k in {"display_name", "credential", "query_template", "requires_repository", "persist", "description"}
            and v is not None
        }
        return replace(self, **known)

    def to_public_dict(self) -> Dict[str, Any]:
        """Credential-free summary for listings and readiness descriptors."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "description": self.description,
            "requires_repository": self.requires_repository,
            "persist": self.persist,
            "configured": self.has_credential,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JudgeConfig":
        """Create from dictionary (YAML registry entries)."""
        judge_id = str(data.get("id") or data.get("name") or "").strip()
        return cls(
            id=judge_id,
            display_name=data.get("display_name") or judge_id,
            credential=data.get("credential", "") or "",
            query_template=data.get("query_template") or DEFAULT_QUERY_TEMPLATE,
            requires_repository=bool(data.get("requires_repository", True)),
            persist=bool(data.get("persist", False)),
            description=data.get("description", "") or "",
        )
