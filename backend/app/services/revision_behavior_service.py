# backend/app/services/revision_behavior_service.py
"""
RevisionBehaviorService（修订行为分析服务）

- 输入：一次写作会话按时间升序排列的完整事件日志
- 输出：RevisionBehaviorData，描述学生在点击"分析"之后如何修改文章
- 纯计算：不做 I/O、不持有状态，可并发地为不同会话调用

唯一的非确定性来源：会话中没有 analyze_clicked 或 final_submission 事件时，
用"当前时间"代替对应的时间戳。时钟通过构造参数注入，测试中应传入固定时钟。

事件既可以是 InteractionEvent，也可以是等价的 dict 或 ORM 行；
未知的事件类型和无法解析的时间戳都不会导致异常。
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional

from app.core.markers import claim_evidence_structure_changed
from app.core.section_diff import SectionRevisionTracker
from app.core.similarity import thesis_changed_significantly
from app.core.time_utils import ensure_utc, utc_now
from app.core.tokenizer import word_count
from app.schemas.interaction import InteractionEventType
from app.schemas.revision import FeedbackLevelCounts, RevisionBehaviorData

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# 每种事件类型在统计中对应的计数字段，None 表示该类型不单独计数。
# 必须覆盖 InteractionEventType 的全部成员。
_TALLY_FIELD_BY_EVENT: Dict[InteractionEventType, Optional[str]] = {
    InteractionEventType.INITIAL_DRAFT: None,
    InteractionEventType.EDIT: "edits",
    InteractionEventType.FEEDBACK_LEVEL_1: "level1",
    InteractionEventType.FEEDBACK_LEVEL_2: "level2",
    InteractionEventType.FEEDBACK_LEVEL_3: "level3",
    InteractionEventType.ANALYZE_CLICKED: None,
    InteractionEventType.FINAL_SUBMISSION: None,
}

_unhandled = set(InteractionEventType) - set(_TALLY_FIELD_BY_EVENT)
if _unhandled:
    raise RuntimeError(
        f"RevisionBehaviorService: 事件类型未在分发表中处理: {sorted(t.value for t in _unhandled)}"
    )


class _LoggedEvent(NamedTuple):
    event_type: Optional[InteractionEventType]
    timestamp: Optional[datetime]
    essay_text: str


def _read_field(event: Any, name: str) -> Any:
    if isinstance(event, dict):
        return event.get(name)
    return getattr(event, name, None)


def _coerce_timestamp(raw: Any) -> Optional[datetime]:
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    # 数值时间戳按 Unix 毫秒处理（前端 Date.now()）
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(raw, str):
        value = raw.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(value))
        except ValueError:
            return None
    return None


def _coerce_event_type(raw: Any) -> Optional[InteractionEventType]:
    if isinstance(raw, InteractionEventType):
        return raw
    try:
        return InteractionEventType(raw)
    except (ValueError, TypeError):
        return None


def _normalize(event: Any) -> _LoggedEvent:
    essay_text = _read_field(event, "essay_text")
    return _LoggedEvent(
        event_type=_coerce_event_type(_read_field(event, "event_type")),
        timestamp=_coerce_timestamp(_read_field(event, "timestamp")),
        essay_text=essay_text if isinstance(essay_text, str) else "",
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RevisionBehaviorService:
    def __init__(self, clock: Optional[Clock] = None):
        """
        初始化修订行为分析服务

        Args:
            clock: 返回当前时间的函数，缺少边界事件时使用；默认取系统 UTC 时间
        """
        self._clock = clock or utc_now

    def _now(self) -> datetime:
        return ensure_utc(self._clock())

    def build_revision_behavior_data(self, events: Optional[Iterable[Any]]) -> RevisionBehaviorData:
        """
        主入口：从一次会话的事件日志推导修订行为指标。

        Args:
            events: 按时间升序排列的事件列表，允许为空或 None

        Returns:
            RevisionBehaviorData: 修订行为指标
        """
        logged: List[_LoggedEvent] = [_normalize(event) for event in (events or [])]

        # --- 1. 定位边界事件 ---
        analyze_event = next((e for e in logged if e.event_type is InteractionEventType.ANALYZE_CLICKED), None)
        final_event = next(
            (e for e in reversed(logged) if e.event_type is InteractionEventType.FINAL_SUBMISSION), None
        )
        initial_event = next((e for e in logged if e.event_type is InteractionEventType.INITIAL_DRAFT), None)

        boundary = analyze_event.timestamp if analyze_event and analyze_event.timestamp else None
        if boundary is None:
            boundary = self._now()
            logger.debug("RevisionBehaviorService: 没有 analyze_clicked 事件，使用当前时间作为分析边界")
        submitted_at = final_event.timestamp if final_event and final_event.timestamp else None
        if submitted_at is None:
            submitted_at = self._now()
            logger.debug("RevisionBehaviorService: 没有 final_submission 事件，使用当前时间作为提交时间")

        first_draft = initial_event.essay_text if initial_event else ""
        final_draft = final_event.essay_text if final_event else ""

        # --- 2. 划分边界之后的事件（包含与边界同一时刻的事件） ---
        after_boundary = [e for e in logged if e.timestamp is not None and e.timestamp >= boundary]

        # --- 3. 按类型计数 ---
        tallies = {"edits": 0, "level1": 0, "level2": 0, "level3": 0}
        for event in after_boundary:
            field = _TALLY_FIELD_BY_EVENT.get(event.event_type)
            if field is not None:
                tallies[field] += 1

        # --- 4. 段落修订量 ---
        tracker = SectionRevisionTracker()
        tracker.add_snapshots(e.essay_text for e in after_boundary)

        window_minutes = _round_half_up((submitted_at - boundary).total_seconds() / 60)
        first_count = word_count(first_draft)
        final_count = word_count(final_draft)

        result = RevisionBehaviorData(
            total_edits_after_analyze=tallies["edits"],
            feedback_level_counts=FeedbackLevelCounts(
                level1=tallies["level1"],
                level2=tallies["level2"],
                level3=tallies["level3"],
            ),
            revision_window_minutes=max(0, window_minutes),
            thesis_changed_significantly=thesis_changed_significantly(first_draft, final_draft),
            claim_evidence_structure_changed=claim_evidence_structure_changed(first_draft, final_draft),
            most_revised_sections=tracker.most_revised(),
            first_draft_word_count=first_count,
            final_draft_word_count=final_count,
            first_to_final_word_delta=final_count - first_count,
            total_logs_analyzed=len(after_boundary),
        )
        logger.debug(f"RevisionBehaviorService: 分析了 {len(logged)} 条事件，边界之后 {len(after_boundary)} 条")
        return result


# 单例导出
revision_behavior_service = RevisionBehaviorService()


def build_revision_behavior_data(events: Optional[Iterable[Any]], clock: Optional[Clock] = None) -> RevisionBehaviorData:
    """便捷函数：需要固定时钟时临时构造服务实例"""
    if clock is None:
        return revision_behavior_service.build_revision_behavior_data(events)
    return RevisionBehaviorService(clock=clock).build_revision_behavior_data(events)
