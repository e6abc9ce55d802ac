# backend/app/api/endpoints/revision.py
"""
API端点：会话事件日志查询、修订行为分析与终稿提交。
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.config.dependency_injection import (
    get_interaction_log_repository,
    get_revision_behavior_service,
    get_revision_report_service,
)
from app.schemas.interaction import InteractionEvent, InteractionEventType, InteractionLogCreate
from app.schemas.response import StandardResponse
from app.schemas.revision import FinalizeSessionRequest, FinalizeSessionResponse, RevisionBehaviorData
from app.services.interaction_log_source import InteractionLogRepository, LogAppendError, LogRetrievalError
from app.services.revision_behavior_service import RevisionBehaviorService
from app.services.revision_report_service import RevisionReportService

logger = logging.getLogger(__name__)

router = APIRouter()

LOG_RETRIEVAL_FAILED = "Failed to retrieve interaction logs"


def _fetch_logs(repository: InteractionLogRepository, session_id: str) -> List[InteractionEvent]:
    # 读取失败必须如实报告，不能退化为空日志
    try:
        return repository.get_session_logs(session_id)
    except LogRetrievalError as e:
        logger.error(f"会话 {session_id} 日志读取失败: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=LOG_RETRIEVAL_FAILED)


@router.get("/{session_id}/logs", response_model=StandardResponse[List[InteractionEvent]])
def get_session_logs(
        session_id: str,
        repository: InteractionLogRepository = Depends(get_interaction_log_repository)
):
    """
    获取会话的完整事件日志（按时间升序）
    """
    return StandardResponse(data=_fetch_logs(repository, session_id))


@router.get("/{session_id}/revision-behavior", response_model=StandardResponse[RevisionBehaviorData])
def get_revision_behavior(
        session_id: str,
        repository: InteractionLogRepository = Depends(get_interaction_log_repository),
        analyzer: RevisionBehaviorService = Depends(get_revision_behavior_service)
):
    """
    计算会话的修订行为指标

    Args:
        session_id: 会话ID
        repository: 事件日志仓库
        analyzer: 修订行为分析服务

    Returns:
        StandardResponse[RevisionBehaviorData]: 修订行为指标
    """
    logs = _fetch_logs(repository, session_id)
    return StandardResponse(data=analyzer.build_revision_behavior_data(logs))


@router.post("/finalize", response_model=StandardResponse[FinalizeSessionResponse])
async def finalize_session(
        request_in: FinalizeSessionRequest,
        repository: InteractionLogRepository = Depends(get_interaction_log_repository),
        analyzer: RevisionBehaviorService = Depends(get_revision_behavior_service),
        report_service: RevisionReportService = Depends(get_revision_report_service)
):
    """
    提交终稿并生成修订报告

    1. 同步写入 final_submission 事件（携带终稿全文）
    2. 读取会话完整日志并计算修订行为指标
    3. 生成修订报告（LLM 失败时使用本地模板）
    """
    try:
        final_event = repository.append(InteractionLogCreate(
            session_id=request_in.session_id,
            event_type=InteractionEventType.FINAL_SUBMISSION,
            essay_text=request_in.final_essay_text,
            metadata={"source": "submit_button"},
        ))
    except LogAppendError as e:
        logger.error(f"会话 {request_in.session_id} 写入 final_submission 失败: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to finalize session")

    logs = _fetch_logs(repository, request_in.session_id)
    revision_data = analyzer.build_revision_behavior_data(logs)
    summary = await report_service.generate_report(revision_data)

    response_data = FinalizeSessionResponse(
        final_submission_log_id=final_event.id,
        revision_data=revision_data,
        summary=summary,
        submitted_at=final_event.timestamp,
    )
    return StandardResponse(data=response_data)
