from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class FeedbackLevelCounts(BaseModel):
    """各层级反馈的展开次数"""
    model_config = ConfigDict(frozen=True)

    level1: int = 0
    level2: int = 0
    level3: int = 0


class RevisionBehaviorData(BaseModel):
    """修订行为指标

    由一次会话的事件日志推导出的只读结果，可直接序列化为扁平 JSON。

    Attributes:
        total_edits_after_analyze: 点击分析之后的编辑次数
        feedback_level_counts: 点击分析之后各层级反馈的展开次数
        revision_window_minutes: 从点击分析到最终提交经过的分钟数（不小于 0）
        thesis_changed_significantly: 初稿与终稿论点句是否显著不同
        claim_evidence_structure_changed: 主张/证据标记数量是否明显变化
        most_revised_sections: 修订量最大的至多 3 个段落标签，降序
        first_draft_word_count: 初稿词数
        final_draft_word_count: 终稿词数
        first_to_final_word_delta: 终稿词数 - 初稿词数
        total_logs_analyzed: 参与统计的事件数（分析边界之后）
    """
    model_config = ConfigDict(frozen=True)

    total_edits_after_analyze: int = 0
    feedback_level_counts: FeedbackLevelCounts = Field(default_factory=FeedbackLevelCounts)
    revision_window_minutes: int = 0
    thesis_changed_significantly: bool = False
    claim_evidence_structure_changed: bool = False
    most_revised_sections: List[str] = Field(default_factory=list)
    first_draft_word_count: int = 0
    final_draft_word_count: int = 0
    first_to_final_word_delta: int = 0
    total_logs_analyzed: int = 0


class FinalizeSessionRequest(BaseModel):
    """提交终稿请求模型"""
    session_id: str = Field(..., min_length=1, description="会话ID")
    final_essay_text: str = Field(..., min_length=1, description="终稿全文")


class FinalizeSessionResponse(BaseModel):
    """提交终稿响应模型

    Attributes:
        final_submission_log_id: 新写入的 final_submission 事件ID
        revision_data: 修订行为指标
        summary: 修订报告文本（LLM 生成或本地模板）
        submitted_at: 提交时间
    """
    final_submission_log_id: Optional[int] = None
    revision_data: RevisionBehaviorData
    summary: str
    submitted_at: datetime
