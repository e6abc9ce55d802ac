# backend/app/services/interaction_log_source.py
"""
会话事件日志的读写入口

修订分析只依赖 get_session_logs(session_id)：一次调用返回该会话按时间升序排列的完整日志。
读取失败统一抛出 LogRetrievalError，调用方必须把它当作失败处理，
不能当成"会话没有事件"继续分析。
"""
import logging
from itertools import count
from typing import Dict, List, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.time_utils import ensure_utc, utc_now
from app.crud.crud_event import interaction_log as crud_interaction_log
from app.models.event import InteractionLog
from app.schemas.interaction import InteractionEvent, InteractionLogCreate

logger = logging.getLogger(__name__)


class LogRetrievalError(Exception):
    """读取会话事件日志失败（连接、权限、存储错误等）"""

    def __init__(self, session_id: str, reason: str):
        super().__init__(f"Failed to retrieve interaction logs for session {session_id}: {reason}")
        self.session_id = session_id
        self.reason = reason


class LogAppendError(Exception):
    """写入会话事件失败"""


# 定义接口协议，便于依赖注入和模拟
class InteractionLogRepository(Protocol):
    def get_session_logs(self, session_id: str) -> List[InteractionEvent]:
        ...

    def append(self, event_in: InteractionLogCreate) -> InteractionEvent:
        ...


def _row_to_event(row: InteractionLog) -> InteractionEvent:
    feedback_level = row.feedback_level if row.feedback_level in (1, 2, 3) else None
    return InteractionEvent(
        id=row.id,
        session_id=row.session_id,
        timestamp=ensure_utc(row.timestamp),
        event_type=row.event_type,
        essay_text=row.essay_text,
        feedback_level=feedback_level,
        metadata=row.event_metadata,
    )


class SqlInteractionLogRepository:
    def __init__(self, db: Session):
        """
        基于 SQLAlchemy 的事件日志仓库

        Args:
            db: 数据库会话，由调用方管理生命周期
        """
        self._db = db

    def get_session_logs(self, session_id: str) -> List[InteractionEvent]:
        try:
            rows = crud_interaction_log.get_by_session(self._db, session_id=session_id)
        except SQLAlchemyError as e:
            logger.error(f"SqlInteractionLogRepository: 读取会话 {session_id} 的事件日志失败: {e}")
            raise LogRetrievalError(session_id, str(e)) from e
        return [_row_to_event(row) for row in rows]

    def append(self, event_in: InteractionLogCreate) -> InteractionEvent:
        try:
            row = crud_interaction_log.create_from_event(self._db, obj_in=event_in)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"SqlInteractionLogRepository: 写入会话 {event_in.session_id} 的事件失败: {e}")
            raise LogAppendError(str(e)) from e
        return _row_to_event(row)


class InMemoryInteractionLogRepository:
    """内存事件日志仓库，用于测试和本地调试"""

    def __init__(self):
        self._logs: Dict[str, List[InteractionEvent]] = {}
        self._ids = count(1)

    def get_session_logs(self, session_id: str) -> List[InteractionEvent]:
        # sorted 稳定，同一时刻保持写入顺序
        return sorted(self._logs.get(session_id, []), key=lambda event: event.timestamp)

    def append(self, event_in: InteractionLogCreate) -> InteractionEvent:
        event = InteractionEvent(
            id=next(self._ids),
            session_id=event_in.session_id,
            timestamp=ensure_utc(event_in.timestamp) if event_in.timestamp else utc_now(),
            event_type=event_in.event_type,
            essay_text=event_in.essay_text,
            feedback_level=event_in.feedback_level,
            metadata=event_in.metadata,
        )
        self._logs.setdefault(event_in.session_id, []).append(event)
        return event
