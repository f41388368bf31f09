"""
Webhook Receiver

Accepts asynchronous analysis events pushed by the upstream platform and keeps
completed analyses keyed by conversation id, for the frontend to poll.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .errors import NotFound


class WebhookEventType(str, Enum):
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_PROGRESS = "analysis_progress"
    ANALYSIS_COMPLETED = "analysis_completed"
    ANALYSIS_ERROR = "analysis_error"


class DifyWebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str
    conversation_id: str
    message_id: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None

    @property
    def event_type(self) -> Optional[WebhookEventType]:
        try:
            return WebhookEventType(self.event)
        except ValueError:
            return None


class WebhookInbox:
    """Completed analyses by conversation id; unbounded, process lifetime."""

    def __init__(self) -> None:
        self._results: Dict[str, DifyWebhookEvent] = {}
        self._lock = asyncio.Lock()

    async def receive(self, event: DifyWebhookEvent, signature: Optional[str] = None) -> Optional[WebhookEventType]:
        logger.info(
            f"Dify webhook received: event={event.event} conversation_id={event.conversation_id} "
            f"message_id={event.message_id}"
        )
        if signature:
            logger.debug(f"Webhook signature present for {event.conversation_id}")

        event_type = event.event_type
        if event_type is WebhookEventType.ANALYSIS_COMPLETED:
            async with self._lock:
                self._results[event.conversation_id] = event
            logger.info(f"Analysis completed for conversation: {event.conversation_id}")
        elif event_type is WebhookEventType.ANALYSIS_ERROR:
            logger.error(f"Analysis error for conversation {event.conversation_id}: {event.error}")
        elif event_type is None:
            logger.warning(f"Unknown webhook event: {event.event}")
        else:
            logger.debug(f"{event_type.value} for conversation: {event.conversation_id}")
        return event_type

    async def get(self, conversation_id: str) -> DifyWebhookEvent:
        event = self._results.get(conversation_id)
        if event is None:
            raise NotFound(conversation_id, "Analysis result not found")
        return event

    async def summaries(self) -> List[Dict[str, Any]]:
        return [
            {
                "conversation_id": conversation_id,
                "event": event.event,
                "timestamp": event.timestamp,
                "has_result": bool(event.result),
            }
            for conversation_id, event in list(self._results.items())
        ]

    def __len__(self) -> int:
        return len(self._results)
