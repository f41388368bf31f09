"""
Per-Judge Route Adapters

One adapter per judge. An adapter validates inbound requests, picks the
request id, runs the judge's persona query through the dispatcher, and keeps
the outcome in the shared Result Store (plus the analysis archive for judges
that persist).

Request lifecycle: received -> dispatched -> completed | degraded | failed.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Iterator, List, Mapping, Optional

from loguru import logger

from .dispatcher import ProxyDispatcher
from .errors import MissingField, TransportError, UpstreamError
from .judges import JudgeConfig, JudgeRegistry
from .persistence.archive import AnalysisArchive
from .result_store import ResultEntry, ResultStore
from .schemas import AnalysisRequest, AnalysisResult, RequestState, advance


def generate_request_id(judge_id: str, user_id: Optional[str] = None) -> str:
    """
    Use the caller's user id when given so a user's repeated requests
    overwrite their own debug entry; otherwise judge id + epoch millis +
    random suffix, unique between anonymous callers in the same tick.
    """
    if isinstance(user_id, str) and user_id.strip():
        return user_id.strip()
    return f"{judge_id}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class JudgeRouteAdapter:
    def __init__(
        self,
        judge: JudgeConfig,
        dispatcher: ProxyDispatcher,
        store: ResultStore,
        archive: Optional[AnalysisArchive] = None,
    ):
        self.judge = judge
        self._dispatcher = dispatcher
        self._store = store
        self._archive = archive

    @property
    def judge_id(self) -> str:
        return self.judge.id

    # =========================================================================
    # SUBMIT
    # =========================================================================

    def validate(self, request: AnalysisRequest) -> None:
        """Fail fast before any upstream call or store write."""
        if not request.has_artifact:
            raise MissingField("repo_url", "repo_url or repo_pdf is required")
        if self.judge.requires_repository and not request.repository_url:
            raise MissingField("repo_url")

    async def submit(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Run one analysis for this judge.

        Upstream and transport failures are returned as a non-success result
        (and stored as ``failed``); only validation errors raise.

        Raises:
            MissingField: required artifact missing
        """
        self.validate(request)

        state = RequestState.RECEIVED
        request_id = generate_request_id(self.judge.id, request.user_id)
        query = self.judge.render_query(request.repository_url, request.document_ref)

        logger.info(
            f"{self.judge.display_name} request received "
            f"(request_id={request_id}, repo_url={request.repository_url}, repo_pdf={request.document_ref})"
        )

        state = advance(state, RequestState.DISPATCHED)
        try:
            result = await self._dispatcher.dispatch(
                self.judge.id,
                query,
                request.inputs(),
                user=request.effective_user,
            )
            state = advance(state, RequestState.DEGRADED if result.degraded else RequestState.COMPLETED)
        except (UpstreamError, TransportError) as exc:
            logger.error(f"{self.judge.display_name} analysis failed (request_id={request_id}): {exc}")
            result = AnalysisResult.failure(exc, self.judge.id)
            state = advance(state, RequestState.FAILED)

        result.request_id = request_id
        result.source_judge_id = self.judge.id

        await self._store.put(
            ResultEntry(
                request_id=request_id,
                judge_id=self.judge.id,
                user_id=request.effective_user,
                state=state,
                result=result,
                request=request.echo(),
            )
        )

        if self._archive is not None and state is RequestState.COMPLETED:
            await self._archive.record(self.judge, request, result)

        return result

    # =========================================================================
    # DEBUG SURFACE
    # =========================================================================

    async def query(self, request_id: str) -> AnalysisResult:
        """Raises NotFound for unknown ids."""
        entry = await self._store.require(self.judge.id, request_id)
        return entry.result

    async def entry(self, request_id: str) -> ResultEntry:
        return await self._store.require(self.judge.id, request_id)

    async def list_debug(self) -> List[Dict[str, Any]]:
        return await self._store.summaries(self.judge.id)

    async def update(self, request_id: str, partial: Mapping[str, Any]) -> AnalysisResult:
        """Shallow-merge ``partial`` into the stored result. Raises NotFound."""
        entry = await self._store.update(self.judge.id, request_id, partial)
        logger.info(f"{self.judge.display_name} request updated (request_id={request_id})")
        return entry.result


class JudgeGateway:
    """
    All route adapters, built once from a frozen registry.

    Usage:
        gateway = JudgeGateway(registry, dispatcher, ResultStore())
        result = await gateway.adapter("business").submit(request)
    """

    def __init__(
        self,
        registry: JudgeRegistry,
        dispatcher: ProxyDispatcher,
        store: ResultStore,
        archive: Optional[AnalysisArchive] = None,
    ):
        self.registry = registry
        self.dispatcher = dispatcher
        self.store = store
        self.archive = archive
        self._adapters: Dict[str, JudgeRouteAdapter] = {
            judge.id: JudgeRouteAdapter(judge, dispatcher, store, archive) for judge in registry
        }

    def adapter(self, judge_id: str) -> JudgeRouteAdapter:
        """Raises UnknownJudge for ids not in the registry."""
        judge = self.registry.resolve(judge_id)
        return self._adapters[judge.id]

    def __iter__(self) -> Iterator[JudgeRouteAdapter]:
        return iter(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)
