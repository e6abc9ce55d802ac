# backend/app/core/similarity.py
"""
基于词表集合的 Jaccard 相似度，用于论点漂移检测。
"""
from app.core.tokenizer import tokenize, extract_thesis

# 论点句相似度低于该值即视为"显著改变"（固定值，不做配置）
THESIS_SIMILARITY_THRESHOLD = 0.55


def jaccard_similarity(text_a: str, text_b: str) -> float:
    """
    计算两段文本词表（去重后）的 Jaccard 相似度 |A∩B| / |A∪B|。

    两边词表都为空时定义为 1.0，只有一边为空时为 0.0。
    """
    vocab_a = set(tokenize(text_a))
    vocab_b = set(tokenize(text_b))
    if not vocab_a and not vocab_b:
        return 1.0
    if not vocab_a or not vocab_b:
        return 0.0
    return len(vocab_a & vocab_b) / len(vocab_a | vocab_b)


def thesis_changed_significantly(first_draft: str, final_draft: str) -> bool:
    """
    判断初稿与终稿的论点句是否发生了显著变化。

    Args:
        first_draft: 初稿全文
        final_draft: 终稿全文

    Returns:
        bool: 两者论点句的相似度严格低于 THESIS_SIMILARITY_THRESHOLD 时为 True
    """
    similarity = jaccard_similarity(extract_thesis(first_draft), extract_thesis(final_draft))
    return similarity < THESIS_SIMILARITY_THRESHOLD
