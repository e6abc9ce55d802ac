# backend/app/core/tokenizer.py
"""
文本分词与规范化

所有修订指标（词数、相似度、段落变化量）都基于同一套分词规则：
- 全部转为小写
- 只保留由字母、数字和撇号组成的连续片段（如 "don't" 视为一个词）
- 其他字符（标点、空白）一律视为分隔符
"""
import re
from typing import List

_TOKEN_PATTERN = re.compile(r"[a-z0-9']+")
# 论点句：到第一个句末标点（含）为止
_FIRST_SENTENCE_PATTERN = re.compile(r"[^.!?]*[.!?]")


def tokenize(text: str) -> List[str]:
    """
    将文本切分为规范化后的词序列，保留重复和顺序。

    Args:
        text: 任意文本，允许为空或 None

    Returns:
        List[str]: 小写词列表
    """
    if not text:
        return []
    return _TOKEN_PATTERN.findall(text.lower())


def word_count(text: str) -> int:
    """按 tokenize 的结果计算词数"""
    return len(tokenize(text))


def extract_thesis(text: str) -> str:
    """
    提取文章的论点句（即第一句话）。

    Args:
        text: 文章全文

    Returns:
        str: 第一个句末标点（. ! ?）之前的内容（包含该标点）；
             没有句末标点时返回去除首尾空白后的全文；空文本返回空字符串
    """
    stripped = (text or "").strip()
    if not stripped:
        return ""
    match = _FIRST_SENTENCE_PATTERN.match(stripped)
    if match:
        return match.group(0).strip()
    return stripped
