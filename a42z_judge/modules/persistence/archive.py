from __future__ import annotations

import json
from typing import Any, Dict, Optional

from loguru import logger

from ..judges import JudgeConfig
from ..schemas import AnalysisRequest, AnalysisResult
from .db import Database
from .models import JudgeComment


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _metadata(judge: JudgeConfig, result: AnalysisResult) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"judge_id": judge.id, "message_id": result.message_id}
    if isinstance(result.metadata, dict):
        metadata.update(result.metadata)
    elif result.metadata is not None:
        metadata["metadata"] = result.metadata
    return metadata


class AnalysisArchive:
    """
    Best-effort insert of finished analyses into ``judge_comments``.

    Only judges with ``persist`` enabled are archived, and only successful
    results. Insert failures are logged and swallowed: callers never depend
    on the row being there.
    """

    def __init__(self, database: Database):
        self._database = database

    async def record(self, judge: JudgeConfig, request: AnalysisRequest, result: AnalysisResult) -> bool:
        if not judge.persist or not result.success:
            return False

        row = JudgeComment(
            conversation_id=_as_text(result.conversation_id),
            github_repo_url=request.repository_url,
            gmail=request.effective_user,
            analysis_result=_as_text(result.answer),
            analysis_metadata=json.dumps(_metadata(judge, result), ensure_ascii=False, default=str),
        )

        try:
            async with self._database.session() as session:
                session.add(row)
                await session.commit()
        except Exception as e:
            logger.warning(f"Archiving analysis for judge '{judge.id}' failed: {type(e).__name__}: {e}")
            return False

        logger.debug(f"Archived analysis for judge '{judge.id}' (conversation_id={result.conversation_id})")
        return True

