import logging

from app.celery_app import celery_app
from app.db.database import SessionLocal
from app.schemas.interaction import InteractionLogCreate
from app.services.interaction_log_source import SqlInteractionLogRepository

logger = logging.getLogger(__name__)


@celery_app.task(name='app.tasks.db_tasks.save_interaction_log_task')
def save_interaction_log_task(event_data: dict):
    """一个专门用于保存会话事件的轻量级任务"""
    db = SessionLocal()
    try:
        event_in = InteractionLogCreate(**event_data)
        logger.info(f"DB Task: Saving interaction event - session_id: {event_in.session_id}, event_type: {event_in.event_type.value}")
        saved = SqlInteractionLogRepository(db).append(event_in)
        logger.info(f"DB Task: Saved interaction event {saved.id} for session {event_in.session_id}")
        return saved.id
    except Exception as e:
        logger.error(f"DB Task: Error saving interaction event: {e}")
        raise
    finally:
        db.close()
