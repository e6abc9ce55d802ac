# backend/app/services/llm_gateway.py
import os
import asyncio
import logging
from typing import List, Dict, Optional
from openai import OpenAI
from app.core.config import settings

logger = logging.getLogger(__name__)


class LLMGatewayError(Exception):
    """LLM 调用失败或返回内容为空"""


class LLMGateway:
    """LLM网关服务"""

    def __init__(self):
        # 从环境变量或配置中获取API配置
        self.api_key = os.getenv('FEEDBACK_OPENAI_API_KEY', settings.FEEDBACK_OPENAI_API_KEY)
        self.api_base = os.getenv('FEEDBACK_OPENAI_API_BASE', settings.FEEDBACK_OPENAI_API_BASE)
        self.model = os.getenv('FEEDBACK_OPENAI_MODEL', settings.FEEDBACK_OPENAI_MODEL)

        self.max_tokens = int(os.getenv('LLM_MAX_TOKENS', settings.LLM_MAX_TOKENS))
        self.temperature = float(os.getenv('REPORT_TEMPERATURE', settings.REPORT_TEMPERATURE))

        self.client = OpenAI(
            api_key=self.api_key,
            base_url=self.api_base
        )

    async def get_completion(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> str:
        """
        获取LLM完成结果

        Args:
            system_prompt: 系统提示词
            messages: 消息列表
            max_tokens: 最大token数
            temperature: 温度参数

        Returns:
            str: LLM生成的回复（去除首尾空白）

        Raises:
            LLMGatewayError: 调用失败或没有返回内容
        """
        full_messages = [{"role": "system", "content": system_prompt}] + messages
        max_tokens = max_tokens or self.max_tokens
        temperature = self.temperature if temperature is None else temperature

        try:
            # OpenAI客户端是同步的，使用 asyncio.to_thread 在异步环境中运行
            response = await asyncio.to_thread(
                self.client.chat.completions.create,
                model=self.model,
                messages=full_messages,
                max_tokens=max_tokens,
                temperature=temperature
            )
        except Exception as e:
            logger.error(f"LLMGateway: 调用 {self.model} 失败: {e}")
            raise LLMGatewayError(str(e)) from e

        content = None
        if response.choices:
            content = response.choices[0].message.content
        if not content or not content.strip():
            raise LLMGatewayError("LLM returned an empty completion")
        return content.strip()


# 创建单例实例
llm_gateway = LLMGateway()
