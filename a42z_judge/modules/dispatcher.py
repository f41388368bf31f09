"""
Proxy Dispatcher

Sends one blocking chat-message request per call to the upstream workflow
platform on behalf of a judge and normalizes what comes back.

Outcome classification:
- 2xx with a JSON object body      -> successful AnalysisResult (fields passed through)
- 2xx body that is not a usable JSON object
                                   -> UpstreamError(502, body text)
- non-2xx                          -> UpstreamError(status, body text)
- no response at all               -> TransportError
- body names missing model provider credentials
                                   -> ConfigurationError, downgraded to a
                                      successful result whose answer explains
                                      the problem

A single attempt is made per call. There are no retries: every call is user
triggered and billable upstream.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Mapping, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from .errors import ConfigurationError, TransportError, UpstreamError
from .judges import JudgeConfig, JudgeRegistry
from .schemas import ANONYMOUS_USER, AnalysisResult
from .settings import DEFAULT_CONFIGURATION_ERROR_MARKERS, DEFAULT_DIFY_API_URL, Settings


RESPONSE_MODE = "blocking"


def configuration_error_answer(judge: JudgeConfig) -> str:
    return (
        f"{judge.display_name} could not produce an analysis because its model provider "
        "credentials are not configured on the analysis platform. Ask an administrator to add "
        "the model provider credentials for this judge; the rest of the judging panel is unaffected."
    )


class ProxyDispatcher:
    """
    Forward judge requests upstream with the judge's bearer credential.

    Usage:
        dispatcher = ProxyDispatcher(registry, base_url="https://api.dify.ai/v1")
        result = await dispatcher.dispatch("paul", "Is this a startup?", {"repo_url": url})

    ``transport`` is handed to ``httpx.AsyncClient``; tests pass an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        registry: JudgeRegistry,
        *,
        base_url: str = DEFAULT_DIFY_API_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        configuration_error_markers: Iterable[str] = DEFAULT_CONFIGURATION_ERROR_MARKERS,
    ):
        self._registry = registry
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._markers = tuple(m.lower() for m in configuration_error_markers if m)

    @classmethod
    def from_settings(
        cls,
        registry: JudgeRegistry,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ProxyDispatcher":
        return cls(
            registry,
            base_url=settings.dify_api_url,
            timeout=settings.upstream_timeout_seconds,
            transport=transport,
            configuration_error_markers=settings.configuration_error_markers,
        )

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/chat-messages"

    # =========================================================================
    # DISPATCH
    # =========================================================================

    async def dispatch(
        self,
        judge_id: str,
        query: str,
        inputs: Optional[Mapping[str, Any]] = None,
        user: str = ANONYMOUS_USER,
    ) -> AnalysisResult:
        """
        Run one upstream analysis for ``judge_id``.

        Raises:
            UnknownJudge: judge id not in the registry (no network call made)
            UpstreamError: upstream answered with a non-success status or an unusable body
            TransportError: upstream could not be reached
        """
        judge = self._registry.resolve(judge_id)

        try:
            body = await self._post(judge, query, dict(inputs or {}), user or ANONYMOUS_USER)
        except ConfigurationError as exc:
            return self._configuration_error_result(judge, exc)

        logger.info(f"Dify API response received for {judge.display_name}")
        try:
            return AnalysisResult.from_upstream(body, judge.id)
        except ValidationError as exc:
            logger.error(f"Dify API response for {judge.id} does not fit the result envelope: {exc}")
            raise UpstreamError(502, json.dumps(body, ensure_ascii=False, default=str)) from exc

    def _configuration_error_result(self, judge: JudgeConfig, exc: ConfigurationError) -> AnalysisResult:
        logger.warning(f"Judge '{judge.id}' backend is missing model provider credentials: {exc.details}")
        return AnalysisResult.fallback(judge.id, configuration_error_answer(judge))

    def is_configuration_error(self, body_text: str) -> bool:
        lowered = (body_text or "").lower()
        return any(marker in lowered for marker in self._markers)

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def _post(self, judge: JudgeConfig, query: str, inputs: Dict[str, Any], user: str) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {judge.credential}",
            "Content-Type": "application/json",
        }
        payload = {
            "inputs": inputs,
            "query": query,
            "response_mode": RESPONSE_MODE,
            "user": user,
        }

        logger.info(f"Proxying request to Dify for {judge.display_name}...")
        try:
            async with self._client() as client:
                resp = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.RequestError as exc:
            logger.error(f"Dify transport error for {judge.id}: {type(exc).__name__}: {exc}")
            raise TransportError(details=f"{type(exc).__name__}: {exc}") from exc

        text = resp.text
        if not resp.is_success:
            if self.is_configuration_error(text):
                raise ConfigurationError(details=text)
            logger.error(f"Dify API Error for {judge.id}: {resp.status_code}: {text[:500]}")
            raise UpstreamError(resp.status_code, text)

        try:
            body = resp.json()
        except ValueError as exc:
            logger.error(f"Dify API returned non-JSON body for {judge.id}: {text[:500]}")
            raise UpstreamError(502, text) from exc

        if not isinstance(body, dict):
            raise UpstreamError(502, text)
        return body
