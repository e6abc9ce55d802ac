# backend/app/services/revision_report_service.py
"""
RevisionReportService（修订报告服务）

把 RevisionBehaviorData 交给 LLM 写成一份 "Revision Insights" 反思报告。
LLM 只拿到修订行为数据，不拿到文章内容。
LLM 不可用、调用失败或功能关闭时，返回由同一份数据渲染的本地模板报告。
"""
import json
import logging
from typing import Dict, List, Optional

from app.schemas.revision import RevisionBehaviorData
from app.services.llm_gateway import LLMGateway, LLMGatewayError

logger = logging.getLogger(__name__)

REPORT_HEADING = "Revision Insights"
REPORT_SECTIONS = (
    "Revision Activity Overview",
    "Feedback Escalation Pattern",
    "Structural Changes Observed",
    "Suggested Focus for Future Revision",
)


class RevisionReportService:
    """修订报告生成器"""

    def __init__(self, llm_gateway: Optional[LLMGateway] = None, enabled: bool = True):
        """
        Args:
            llm_gateway: LLM 网关；为 None 时只使用本地模板
            enabled: 是否调用 LLM 生成报告
        """
        self._llm_gateway = llm_gateway
        self._enabled = enabled

        self.system_prompt = (
            "You are an expert writing process analyst. Do NOT summarize essay content. "
            "Summarize revision behavior only and provide reflective insights about decision-making."
        )

        self.user_prompt_template = """
Generate a structured report with the exact heading "{heading}".

Requirements:
- Do NOT summarize essay content.
- Use revision-behavior data only.
- Include these sections in order:
{sections}
- Be specific and actionable.

Revision behavior data:
{data}
"""

    def build_messages(self, data: RevisionBehaviorData) -> List[Dict[str, str]]:
        """构造发送给 LLM 的用户消息"""
        sections = "\n".join(f"  {index}) {name}" for index, name in enumerate(REPORT_SECTIONS, start=1))
        content = self.user_prompt_template.format(
            heading=REPORT_HEADING,
            sections=sections,
            data=json.dumps(data.model_dump(), indent=2),
        )
        return [{"role": "user", "content": content.strip()}]

    @staticmethod
    def build_fallback_report(data: RevisionBehaviorData) -> str:
        """
        用修订行为数据直接渲染报告。

        Args:
            data: 修订行为指标

        Returns:
            str: 与 LLM 报告同样结构的纯文本报告
        """
        delta = data.first_to_final_word_delta
        sign = "+" if delta >= 0 else ""
        counts = data.feedback_level_counts
        sections = ", ".join(data.most_revised_sections) or "none detected"
        thesis = "changed significantly" if data.thesis_changed_significantly else "remained stable"
        structure = "changed" if data.claim_evidence_structure_changed else "remained stable"

        lines = [
            REPORT_HEADING,
            "",
            REPORT_SECTIONS[0],
            f"- Total revisions after analysis: {data.total_edits_after_analyze}",
            f"- Revision window: {data.revision_window_minutes} minutes",
            f"- Draft length change: {data.first_draft_word_count} -> {data.final_draft_word_count} words ({sign}{delta})",
            "",
            REPORT_SECTIONS[1],
            f"- Level 1 views: {counts.level1}",
            f"- Level 2 views: {counts.level2}",
            f"- Level 3 views: {counts.level3}",
            "",
            REPORT_SECTIONS[2],
            f"- Most revised sections: {sections}",
            f"- Thesis statement: {thesis}",
            f"- Claim/evidence structure: {structure}",
            "",
            REPORT_SECTIONS[3],
            "- Continue escalating to deeper feedback levels when revising key argument sections.",
            "- Make one final cohesion pass after substantive edits to stabilize structure.",
            "- Track revision goals per paragraph before editing to improve efficiency.",
        ]
        return "\n".join(lines)

    async def generate_report(self, data: RevisionBehaviorData) -> str:
        """
        生成修订报告，LLM 失败时回退到本地模板。

        Args:
            data: 修订行为指标

        Returns:
            str: 报告文本
        """
        if not self._enabled or self._llm_gateway is None:
            return self.build_fallback_report(data)

        try:
            return await self._llm_gateway.get_completion(
                system_prompt=self.system_prompt,
                messages=self.build_messages(data),
            )
        except LLMGatewayError as e:
            logger.warning(f"RevisionReportService: LLM 报告生成失败，使用本地模板: {e}")
            return self.build_fallback_report(data)
