# backend/app/core/markers.py
"""
论证标记词统计

用固定的提示词表粗略估计文章中"主张"和"证据"的数量，
比较初稿与终稿的差值来判断论证结构是否发生变化。
"""
import re
from functools import lru_cache
from typing import Iterable, Pattern, Tuple

CLAIM_MARKERS: Tuple[str, ...] = (
    "therefore",
    "thus",
    "hence",
    "consequently",
    "i believe",
    "i argue",
    "in my opinion",
    "clearly",
    "should",
    "must",
)

EVIDENCE_MARKERS: Tuple[str, ...] = (
    "for example",
    "for instance",
    "according to",
    "research",
    "studies",
    "study",
    "data",
    "statistics",
    "evidence",
    "survey",
    "such as",
    "percent",
)

# 主张或证据标记数量变化达到该值即认为结构改变
MARKER_DELTA_THRESHOLD = 2


@lru_cache(maxsize=None)
def _marker_pattern(marker: str) -> Pattern[str]:
    # 多词短语之间允许任意空白；使用前瞻以便重叠出现也能分别计数
    words = [re.escape(word) for word in marker.lower().split()]
    body = r"\s+".join(words)
    return re.compile(r"(?=\b" + body + r"\b)", re.IGNORECASE)


def count_marker(text: str, marker: str) -> int:
    """统计单个标记词在文本中按整词、不区分大小写出现的次数"""
    if not text or not marker.strip():
        return 0
    return len(_marker_pattern(marker).findall(text))


def count_markers(text: str, markers: Iterable[str]) -> int:
    """
    统计一组标记词在文本中出现的总次数。

    Args:
        text: 待统计文本
        markers: 标记词/短语列表

    Returns:
        int: 所有标记词出现次数之和
    """
    return sum(count_marker(text, marker) for marker in markers)


def claim_evidence_structure_changed(first_draft: str, final_draft: str) -> bool:
    """主张标记或证据标记的数量变化（绝对值）达到 MARKER_DELTA_THRESHOLD 时返回 True"""
    claim_delta = abs(count_markers(final_draft, CLAIM_MARKERS) - count_markers(first_draft, CLAIM_MARKERS))
    evidence_delta = abs(count_markers(final_draft, EVIDENCE_MARKERS) - count_markers(first_draft, EVIDENCE_MARKERS))
    return claim_delta >= MARKER_DELTA_THRESHOLD or evidence_delta >= MARKER_DELTA_THRESHOLD
