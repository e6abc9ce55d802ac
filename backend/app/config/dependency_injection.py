from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.database import get_db
from app.services.llm_gateway import llm_gateway
from app.services.interaction_log_source import InteractionLogRepository, SqlInteractionLogRepository
from app.services.revision_behavior_service import RevisionBehaviorService, revision_behavior_service
from app.services.revision_report_service import RevisionReportService


def get_interaction_log_repository(db: Session = Depends(get_db)) -> InteractionLogRepository:
    """
    获取事件日志仓库实例（每个请求一个数据库会话）
    """
    return SqlInteractionLogRepository(db)


def get_revision_behavior_service() -> RevisionBehaviorService:
    """
    获取修订行为分析服务实例
    """
    return revision_behavior_service


def get_llm_gateway():
    """
    获取LLM网关服务实例；报告生成关闭时返回 None
    """
    if not settings.ENABLE_REPORT_GENERATION:
        return None
    return llm_gateway


_revision_report_service_instance = None

def get_revision_report_service() -> RevisionReportService:
    """
    获取修订报告服务实例（单例模式）
    """
    global _revision_report_service_instance
    if _revision_report_service_instance is None:
        _revision_report_service_instance = RevisionReportService(
            llm_gateway=get_llm_gateway(),
            enabled=settings.ENABLE_REPORT_GENERATION
        )
    return _revision_report_service_instance
