from typing import List
from sqlalchemy.orm import Session
from app.core.time_utils import ensure_utc, utc_now
from app.crud.base import CRUDBase, SortDirection
from app.models.event import InteractionLog
from app.schemas.interaction import InteractionLogCreate


class CRUDInteractionLog(CRUDBase[InteractionLog, InteractionLogCreate]):
    def get_by_session(self, db: Session, *, session_id: str) -> List[InteractionLog]:
        """获取指定会话的全部事件日志，按时间戳升序（同一时刻按写入顺序）排列。

        Args:
            db: 数据库会话
            session_id: 会话ID

        Returns:
            List[InteractionLog]: 完整的事件日志，不分页
        """
        return self.get_multi(
            db,
            limit=None,
            filter_conditions={"session_id": session_id},
            sort_by=[("timestamp", SortDirection.ASC), ("id", SortDirection.ASC)]
        )

    def create_from_event(self, db: Session, *, obj_in: InteractionLogCreate) -> InteractionLog:
        """根据上报的事件创建日志记录。

        未提供时间戳时使用当前 UTC 时间；所有时间统一转换为 UTC 存储。

        Args:
            db: 数据库会话
            obj_in: 事件上报数据

        Returns:
            InteractionLog: 创建的事件日志记录
        """
        return self.create(db, obj_in={
            "session_id": obj_in.session_id,
            "timestamp": ensure_utc(obj_in.timestamp) if obj_in.timestamp else utc_now(),
            "event_type": obj_in.event_type.value,
            "essay_text": obj_in.essay_text,
            "feedback_level": obj_in.feedback_level,
            "event_metadata": obj_in.metadata,
        })

interaction_log = CRUDInteractionLog(InteractionLog)
