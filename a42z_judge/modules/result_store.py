"""
Result Store

In-memory debug cache of the last result per (judge, request id). Entries are
never evicted and live for the lifetime of the process; this is a polling and
debugging aid, not a system of record.

Writes are serialized by one asyncio lock so each put/update is atomic.
Two requests racing on the same id still resolve last-write-wins: whichever
write lands last is what a later query sees.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import NotFound
from .schemas import AnalysisResult, RequestState


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ResultEntry:
    request_id: str
    judge_id: str
    user_id: str
    state: RequestState
    result: AnalysisResult
    request: Dict[str, Any] = field(default_factory=dict)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: Optional[str] = None

    @property
    def has_result(self) -> bool:
        return bool(self.result.answer)

    def summary(self) -> Dict[str, Any]:
        """Redacted view for debug listings; never includes the answer body."""
        return {
            "data_id": self.request_id,
            "user_id": self.user_id,
            "judge_id": self.judge_id,
            "timestamp": self.created_at,
            "state": self.state.value,
            "has_result": self.has_result,
        }


class ResultStore:
    """Shared by all route adapters; each adapter reads and writes its own judge's keys."""

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], ResultEntry] = {}
        self._lock = asyncio.Lock()

    async def put(self, entry: ResultEntry) -> ResultEntry:
        async with self._lock:
            self._entries[(entry.judge_id, entry.request_id)] = entry
        return entry

    async def get(self, judge_id: str, request_id: str) -> Optional[ResultEntry]:
        return self._entries.get((judge_id, request_id))

    async def require(self, judge_id: str, request_id: str) -> ResultEntry:
        entry = await self.get(judge_id, request_id)
        if entry is None:
            raise NotFound(request_id)
        return entry

    async def update(self, judge_id: str, request_id: str, partial: Mapping[str, Any]) -> ResultEntry:
        """Merge ``partial`` into the stored result; raise NotFound for unknown ids."""
        async with self._lock:
            key = (judge_id, request_id)
            existing = self._entries.get(key)
            if existing is None:
                raise NotFound(request_id)

            merged = existing.result.merged(partial)
            merged.request_id = request_id
            entry = replace(existing, result=merged, updated_at=utc_now_iso())
            self._entries[key] = entry
            return entry

    async def summaries(self, judge_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            entry.summary()
            for (entry_judge, _), entry in list(self._entries.items())
            if judge_id is None or entry_judge == judge_id
        ]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
