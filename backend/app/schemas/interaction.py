from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, Optional, Union
from datetime import datetime
from enum import Enum


class InteractionEventType(str, Enum):
    """写作会话事件类型枚举

    与前端编辑器上报的事件一一对应。新增类型时，所有按类型分发的消费方
    （见 revision_behavior_service 中的分发表）都必须同步补充，否则导入时报错。
    """
    INITIAL_DRAFT = "initial_draft"
    EDIT = "edit"
    FEEDBACK_LEVEL_1 = "feedback_level_1"
    FEEDBACK_LEVEL_2 = "feedback_level_2"
    FEEDBACK_LEVEL_3 = "feedback_level_3"
    ANALYZE_CLICKED = "analyze_clicked"
    FINAL_SUBMISSION = "final_submission"


# 反馈展开事件与反馈层级的对应关系
FEEDBACK_LEVEL_BY_EVENT: Dict[InteractionEventType, int] = {
    InteractionEventType.FEEDBACK_LEVEL_1: 1,
    InteractionEventType.FEEDBACK_LEVEL_2: 2,
    InteractionEventType.FEEDBACK_LEVEL_3: 3,
}

class InteractionEvent(BaseModel):
    """
    会话事件模型，对应 interaction_logs 表中的一行

    事件只追加、不修改；一次会话的全部事件按时间升序组成修订分析的输入。

    Attributes:
        id: 事件ID，由日志存储生成
        session_id: 会话ID
        timestamp: 事件发生时间
        event_type: 事件类型
        essay_text: 文章全文快照，仅草稿/编辑/提交事件携带
        feedback_level: 反馈层级 1-3，仅反馈展开事件携带
        metadata: 附加信息，分析时不解读
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(None, description="事件ID")
    session_id: str = Field(..., min_length=1, description="会话ID")
    timestamp: datetime = Field(..., description="事件发生时间")
    # 其他写入方记录的未知类型按原字符串保留，分析时不计入任何分类
    event_type: Union[InteractionEventType, str] = Field(..., union_mode="left_to_right", description="事件类型")
    essay_text: Optional[str] = Field(None, description="文章全文快照")
    feedback_level: Optional[int] = Field(None, ge=1, le=3, description="反馈层级")
    metadata: Optional[Dict[str, Any]] = Field(None, description="附加信息")


class InteractionLogCreate(BaseModel):
    """
    事件上报请求模型

    Attributes:
        session_id: 会话ID
        event_type: 事件类型
        essay_text: 文章全文快照
        feedback_level: 反馈层级；反馈展开事件可省略，省略时按事件类型补全
        metadata: 附加信息
        timestamp: 事件发生时间，可选，默认为服务端接收时间
    """
    session_id: str = Field(..., min_length=1, description="会话ID")
    event_type: InteractionEventType = Field(..., description="事件类型")
    essay_text: Optional[str] = Field(None, description="文章全文快照")
    feedback_level: Optional[int] = Field(None, ge=1, le=3, description="反馈层级")
    metadata: Optional[Dict[str, Any]] = Field(None, description="附加信息")
    timestamp: Optional[datetime] = Field(None, description="事件发生时间，可选字段，默认为当前时间")

    @model_validator(mode="after")
    def check_feedback_level(self) -> "InteractionLogCreate":
        expected = FEEDBACK_LEVEL_BY_EVENT.get(self.event_type)
        if expected is None:
            if self.feedback_level is not None:
                raise ValueError(f"{self.event_type.value} must not carry a feedback_level")
            return self
        if self.feedback_level is None:
            self.feedback_level = expected
        elif self.feedback_level != expected:
            raise ValueError(f"{self.event_type.value} requires feedback_level {expected}")
        return self
