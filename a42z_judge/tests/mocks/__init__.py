"""
Test mocks package for the judge gateway

Provides a scripted stand-in for the upstream workflow platform, served
through ``httpx.MockTransport`` so no test ever reaches the network.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx


CREDENTIAL_MISSING_BODY = {
    "code": "provider_not_initialize",
    "message": (
        "No valid model provider credentials found. Please go to Settings -> Model Provider "
        "to complete your provider credentials."
    ),
    "status": 400,
}


def dify_answer(
    answer: str = "Strong market fit",
    conversation_id: str = "c1",
    message_id: str = "m1",
    total_tokens: Optional[int] = None,
) -> Dict[str, Any]:
    """Body of a blocking chat-message response."""
    body: Dict[str, Any] = {
        "answer": answer,
        "conversation_id": conversation_id,
        "message_id": message_id,
    }
    if total_tokens is not None:
        body["metadata"] = {"usage": {"total_tokens": total_tokens}}
    return body


Responder = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """
    Scripted upstream. Each call pops the next queued response (the last one
    repeats); every request is recorded for assertions.

    Usage:
        upstream = FakeUpstream().reply(200, dify_answer())
        dispatcher = ProxyDispatcher(registry, transport=upstream.transport)
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responders: List[Responder] = []

    def reply(self, status_code: int = 200, body: Union[Dict[str, Any], str, None] = None) -> "FakeUpstream":
        def responder(request: httpx.Request) -> httpx.Response:
            if isinstance(body, str):
                return httpx.Response(status_code, text=body)
            return httpx.Response(status_code, json=body if body is not None else dify_answer())

        self._responders.append(responder)
        return self

    def fail(self, message: str = "connection refused") -> "FakeUpstream":
        def responder(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError(message, request=request)

        self._responders.append(responder)
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responders:
            return httpx.Response(200, json=dify_answer())
        responder = self._responders.pop(0) if len(self._responders) > 1 else self._responders[0]
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)

    def last_authorization(self) -> Optional[str]:
        return self.requests[-1].headers.get("authorization")


__all__ = [
    "CREDENTIAL_MISSING_BODY",
    "dify_answer",
    "FakeUpstream",
]
