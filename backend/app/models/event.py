from sqlalchemy import Column, Integer, String, DateTime, JSON, Text
from app.core.time_utils import utc_now
from app.db.base_class import Base


class InteractionLog(Base):
    """会话事件日志模型

    只追加的写作会话事件记录，修订行为分析的数据来源。

    Attributes:
        id: 事件唯一ID
        session_id: 写作会话ID
        timestamp: 事件发生的精确时间（UTC）
        event_type: 事件类型，如 `initial_draft`, `edit`, `analyze_clicked`
        essay_text: 事件发生时的文章全文快照，反馈展开事件为空
        feedback_level: 反馈层级 1-3，仅反馈展开事件有值
        event_metadata: 附加信息 JSON（列名避开 SQLAlchemy 保留的 metadata）
    """
    __tablename__ = "interaction_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, index=True, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utc_now, index=True, nullable=False)
    event_type = Column(String, nullable=False)
    essay_text = Column(Text, nullable=True)
    feedback_level = Column(Integer, nullable=True)
    event_metadata = Column(JSON, nullable=True)
