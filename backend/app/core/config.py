from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    """
    应用程序配置设置类，从环境变量或.env文件加载所有配置项。
    使用Pydantic进行数据验证和类型检查。

    包含服务器配置、LLM 接口、数据库与消息队列连接等配置项。
    修订分析中的阈值（论点相似度 0.55、标记数量差 2）是固定常量，不在此配置。
    """
    # Server
    BACKEND_PORT: int = 8000

    # OpenAI (for revision report generation)
    FEEDBACK_OPENAI_API_KEY: str
    FEEDBACK_OPENAI_MODEL: str = "gpt-4o-mini"
    FEEDBACK_OPENAI_API_BASE: str = "https://api.openai.com/v1"

    # Model configuration tells Pydantic where to find the .env file.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

    PROJECT_NAME: str = "Essay Revision Feedback"
    API_V1_STR: str = "/api/v1"

    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    DATABASE_URL: str = "sqlite:///./database.db"
    REDIS_URL: str = "redis://localhost:6379/0"

    # LLM Settings
    LLM_MAX_TOKENS: int = 1500
    REPORT_TEMPERATURE: float = 0.4

    # Module enable/disable flags
    ENABLE_REPORT_GENERATION: bool = True

    LOG_LEVEL: str = "INFO"

# Create a single, globally accessible instance of the settings.
# This will raise a validation error on startup if required settings are missing.
settings = Settings()
