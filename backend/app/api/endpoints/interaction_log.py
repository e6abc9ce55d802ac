# backend/app/api/endpoints/interaction_log.py
"""
API端点，用于接收前端编辑器上报的写作会话事件。
"""
import logging
from fastapi import APIRouter, status

from app.schemas.interaction import InteractionLogCreate
from app.schemas.response import StandardResponse
from app.tasks.db_tasks import save_interaction_log_task

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", status_code=status.HTTP_202_ACCEPTED, response_model=StandardResponse[dict], summary="记录会话事件")
def log_interaction(
    event_in: InteractionLogCreate,
):
    """
    接收并异步持久化单个会话事件。

    - **异步持久化**: 将事件分派到`db_writer_queue`写入事件日志。
    - **快速响应**: 立即返回 `202 Accepted`，不等待后台任务完成。
    """
    save_interaction_log_task.apply_async(
        args=[event_in.model_dump(mode="json")],
        queue='db_writer_queue'
    )
    logger.info(f"Interaction event queued - session_id: {event_in.session_id}, event_type: {event_in.event_type.value}")

    return StandardResponse(code=202, message="Event received for processing", data={"session_id": event_in.session_id})
