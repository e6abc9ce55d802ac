# backend/app/core/section_diff.py
"""
段落级修订量统计

把两个相邻的文章快照按空行切分为段落，按下标逐一对齐后计算每段的变化量。
段落只做位置对齐，不尝试识别插入或删除的段落。
"""
import re
from typing import Dict, Iterable, List, Tuple

from app.core.tokenizer import tokenize

_SECTION_BREAK = re.compile(r"\n\s*\n")

INTRODUCTION_LABEL = "introduction"
CONCLUSION_LABEL = "conclusion"
MOST_REVISED_LIMIT = 3


def split_sections(text: str) -> List[str]:
    """按一个或多个空行切分段落，去掉每段首尾空白并丢弃空段"""
    if not text:
        return []
    sections = (section.strip() for section in _SECTION_BREAK.split(text))
    return [section for section in sections if section]


def section_change_magnitude(before: str, after: str) -> int:
    """
    计算两段文本之间的变化量。

    变化量 = 词数差的绝对值 + 两侧词表的对称差大小

    Args:
        before: 修改前的段落
        after: 修改后的段落

    Returns:
        int: 变化量，相同文本为 0
    """
    before_tokens = tokenize(before)
    after_tokens = tokenize(after)
    before_vocab = set(before_tokens)
    after_vocab = set(after_tokens)
    return abs(len(before_tokens) - len(after_tokens)) + len(before_vocab ^ after_vocab)


def label_section(index: int, section_count: int) -> str:
    """根据段落下标生成标签：首段为 introduction，末段为 conclusion，其余为 body_paragraph_{index}"""
    if index == 0:
        return INTRODUCTION_LABEL
    if index == section_count - 1:
        return CONCLUSION_LABEL
    return f"body_paragraph_{index}"


def diff_sections(before: str, after: str) -> List[Tuple[str, int]]:
    """
    对两个文章快照逐段比较。

    Returns:
        List[Tuple[str, int]]: (段落标签, 变化量)，只包含变化量大于 0 的段落，按下标顺序
    """
    before_sections = split_sections(before)
    after_sections = split_sections(after)
    section_count = max(len(before_sections), len(after_sections))

    changes = []
    for index in range(section_count):
        old = before_sections[index] if index < len(before_sections) else ""
        new = after_sections[index] if index < len(after_sections) else ""
        magnitude = section_change_magnitude(old, new)
        if magnitude:
            changes.append((label_section(index, section_count), magnitude))
    return changes


class SectionRevisionTracker:
    """
    累计一次会话中各段落的修订量

    依次喂入按时间排序的文章快照，每对相邻快照比较一次，
    同一标签的变化量累加。
    """

    def __init__(self):
        # dict 保留插入顺序，用于同分时按首次出现排序
        self._scores: Dict[str, int] = {}
        self._previous_snapshot = None

    def add_snapshot(self, text: str) -> None:
        """追加一个快照；空快照不参与比较，也不打断相邻关系"""
        if not text or not text.strip():
            return
        if self._previous_snapshot is not None:
            for label, magnitude in diff_sections(self._previous_snapshot, text):
                self._scores[label] = self._scores.get(label, 0) + magnitude
        self._previous_snapshot = text

    def add_snapshots(self, texts: Iterable[str]) -> None:
        for text in texts:
            self.add_snapshot(text)

    @property
    def scores(self) -> Dict[str, int]:
        return dict(self._scores)

    def most_revised(self, limit: int = MOST_REVISED_LIMIT) -> List[str]:
        """返回累计变化量最大的前 limit 个段落标签（sorted 稳定，同分保持首次出现顺序）"""
        ranked = sorted(self._scores.items(), key=lambda item: item[1], reverse=True)
        return [label for label, _ in ranked[:limit]]
