#!/usr/bin/env python3
"""
测试事件上报、会话日志查询、修订行为分析和终稿提交接口
文件风格参考 test_session_endpoints_mock.py
"""

import os
import sys
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# 添加项目根目录到 Python 路径
backend_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if backend_path not in sys.path:
    sys.path.insert(0, backend_path)
# 设置测试环境变量，确保 Pydantic Settings 可以初始化
os.environ.setdefault("FEEDBACK_OPENAI_API_KEY", "test-key")

# 导入项目模块
from app.api.endpoints import interaction_log as interaction_log_module
from app.api.endpoints import revision as revision_module
from app.config.dependency_injection import (
    get_interaction_log_repository,
    get_revision_behavior_service,
    get_revision_report_service,
)
from app.core.time_utils import utc_now
from app.db.base_class import Base
from app.schemas.interaction import InteractionEventType, InteractionLogCreate
from app.services.interaction_log_source import (
    InMemoryInteractionLogRepository,
    LogAppendError,
    LogRetrievalError,
)
from app.services.llm_gateway import LLMGatewayError
from app.services.revision_behavior_service import RevisionBehaviorService
from app.services.revision_report_service import REPORT_HEADING, RevisionReportService
from app.tasks import db_tasks

SESSION_ID = "essay-session-42"


def create_test_app(repository, report_service=None):
    app = FastAPI()

    # 覆盖依赖注入
    app.dependency_overrides[get_interaction_log_repository] = lambda: repository
    app.dependency_overrides[get_revision_behavior_service] = lambda: RevisionBehaviorService()
    app.dependency_overrides[get_revision_report_service] = (
        lambda: report_service or RevisionReportService(llm_gateway=None)
    )

    app.include_router(interaction_log_module.router, prefix="/interaction-log")
    app.include_router(revision_module.router, prefix="/sessions")
    return app


@pytest.fixture
def repository():
    """预置一次会话：十分钟前写初稿并点击分析，五分钟前编辑一次"""
    repo = InMemoryInteractionLogRepository()
    now = utc_now()
    repo.append(InteractionLogCreate(
        session_id=SESSION_ID,
        event_type=InteractionEventType.INITIAL_DRAFT,
        essay_text="Phones distract students. Schools see lower grades.",
        timestamp=now - timedelta(minutes=10, seconds=5),
    ))
    repo.append(InteractionLogCreate(
        session_id=SESSION_ID,
        event_type=InteractionEventType.ANALYZE_CLICKED,
        essay_text="Phones distract students. Schools see lower grades.",
        timestamp=now - timedelta(minutes=10),
    ))
    repo.append(InteractionLogCreate(
        session_id=SESSION_ID,
        event_type=InteractionEventType.FEEDBACK_LEVEL_2,
        timestamp=now - timedelta(minutes=8),
    ))
    repo.append(InteractionLogCreate(
        session_id=SESSION_ID,
        event_type=InteractionEventType.EDIT,
        essay_text="Phones distract students. Schools see lower grades.\n\nFor example, one survey agrees.",
        timestamp=now - timedelta(minutes=5),
    ))
    return repo


@pytest.fixture
def client(repository):
    """初始化 FastAPI 测试客户端"""
    return TestClient(create_test_app(repository))


def failing_repository():
    repo = MagicMock()
    repo.get_session_logs.side_effect = LogRetrievalError(SESSION_ID, "connection refused")
    return repo


class TestInteractionLogEndpoint:
    """事件上报接口"""

    def test_event_is_queued(self, client: TestClient):
        payload = {
            "session_id": SESSION_ID,
            "event_type": "feedback_level_1",
            "metadata": {"panel": "lexical"},
        }
        with patch.object(interaction_log_module, "save_interaction_log_task") as task_mock:
            response = client.post("/interaction-log/", json=payload)

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.json()["data"] == {"session_id": SESSION_ID}

        task_mock.apply_async.assert_called_once()
        call_kwargs = task_mock.apply_async.call_args.kwargs
        assert call_kwargs["queue"] == "db_writer_queue"
        queued = call_kwargs["args"][0]
        assert queued["event_type"] == "feedback_level_1"
        assert queued["feedback_level"] == 1
        assert queued["metadata"] == {"panel": "lexical"}

    def test_invalid_event_is_rejected(self, client: TestClient):
        payload = {"session_id": SESSION_ID, "event_type": "edit", "feedback_level": 3}
        with patch.object(interaction_log_module, "save_interaction_log_task") as task_mock:
            response = client.post("/interaction-log/", json=payload)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        task_mock.apply_async.assert_not_called()

    def test_unknown_event_type_is_rejected(self, client: TestClient):
        with patch.object(interaction_log_module, "save_interaction_log_task"):
            response = client.post("/interaction-log/", json={"session_id": SESSION_ID, "event_type": "scroll"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestSessionLogsEndpoint:
    """会话日志查询接口"""

    def test_returns_ordered_logs(self, client: TestClient):
        response = client.get(f"/sessions/{SESSION_ID}/logs")
        assert response.status_code == status.HTTP_200_OK
        logs = response.json()["data"]
        assert [log["event_type"] for log in logs] == [
            "initial_draft", "analyze_clicked", "feedback_level_2", "edit",
        ]

    def test_unknown_session_is_empty(self, client: TestClient):
        response = client.get("/sessions/no-such-session/logs")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == []

    def test_retrieval_failure_returns_502(self):
        client = TestClient(create_test_app(failing_repository()))
        response = client.get(f"/sessions/{SESSION_ID}/logs")
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["detail"] == "Failed to retrieve interaction logs"


class TestRevisionBehaviorEndpoint:
    """修订行为分析接口"""

    def test_metrics_for_session(self, client: TestClient):
        response = client.get(f"/sessions/{SESSION_ID}/revision-behavior")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["total_edits_after_analyze"] == 1
        assert data["feedback_level_counts"] == {"level1": 0, "level2": 1, "level3": 0}
        assert data["total_logs_analyzed"] == 3
        assert data["most_revised_sections"] == ["conclusion"]
        assert data["first_draft_word_count"] == 7

    def test_empty_session_is_zeroed_not_error(self, client: TestClient):
        response = client.get("/sessions/no-such-session/revision-behavior")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["total_logs_analyzed"] == 0
        assert data["most_revised_sections"] == []

    def test_retrieval_failure_is_not_reported_as_empty_session(self):
        client = TestClient(create_test_app(failing_repository()))
        response = client.get(f"/sessions/{SESSION_ID}/revision-behavior")
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert "data" not in response.json()


class TestFinalizeEndpoint:
    """终稿提交接口"""

    FINAL_TEXT = (
        "Phones distract students. Schools see lower grades.\n\n"
        "For example, one survey agrees. According to research, data shows the same."
    )

    def test_finalize_appends_submission_and_reports(self, client: TestClient, repository):
        response = client.post("/sessions/finalize", json={
            "session_id": SESSION_ID,
            "final_essay_text": self.FINAL_TEXT,
        })

        assert response.status_code == status.HTTP_200_OK
        body = response.json()["data"]
        revision_data = body["revision_data"]
        assert revision_data["revision_window_minutes"] == 10
        assert revision_data["total_edits_after_analyze"] == 1
        assert revision_data["total_logs_analyzed"] == 4
        assert revision_data["thesis_changed_significantly"] is False
        assert revision_data["claim_evidence_structure_changed"] is True
        assert body["summary"].startswith(REPORT_HEADING)

        logs = repository.get_session_logs(SESSION_ID)
        assert logs[-1].event_type is InteractionEventType.FINAL_SUBMISSION
        assert logs[-1].essay_text == self.FINAL_TEXT
        assert logs[-1].metadata == {"source": "submit_button"}
        assert body["final_submission_log_id"] == logs[-1].id

    def test_finalize_uses_llm_report_when_available(self, repository):
        gateway = MagicMock()
        gateway.get_completion = AsyncMock(return_value="Revision Insights\n\nLLM generated report")
        client = TestClient(create_test_app(repository, RevisionReportService(llm_gateway=gateway)))

        response = client.post("/sessions/finalize", json={
            "session_id": SESSION_ID,
            "final_essay_text": self.FINAL_TEXT,
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["summary"] == "Revision Insights\n\nLLM generated report"
        gateway.get_completion.assert_awaited_once()

    def test_finalize_falls_back_when_llm_fails(self, repository):
        gateway = MagicMock()
        gateway.get_completion = AsyncMock(side_effect=LLMGatewayError("timeout"))
        client = TestClient(create_test_app(repository, RevisionReportService(llm_gateway=gateway)))

        response = client.post("/sessions/finalize", json={
            "session_id": SESSION_ID,
            "final_essay_text": self.FINAL_TEXT,
        })

        assert response.status_code == status.HTTP_200_OK
        assert "Feedback Escalation Pattern" in response.json()["data"]["summary"]

    def test_empty_final_text_is_rejected(self, client: TestClient):
        response = client.post("/sessions/finalize", json={"session_id": SESSION_ID, "final_essay_text": ""})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_append_failure_returns_500(self):
        repo = MagicMock()
        repo.append.side_effect = LogAppendError("disk full")
        client = TestClient(create_test_app(repo))

        response = client.post("/sessions/finalize", json={
            "session_id": SESSION_ID,
            "final_essay_text": self.FINAL_TEXT,
        })

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        repo.get_session_logs.assert_not_called()

    def test_retrieval_failure_after_append_returns_502(self, repository):
        repository.get_session_logs = MagicMock(side_effect=LogRetrievalError(SESSION_ID, "timeout"))
        client = TestClient(create_test_app(repository))

        response = client.post("/sessions/finalize", json={
            "session_id": SESSION_ID,
            "final_essay_text": self.FINAL_TEXT,
        })

        assert response.status_code == status.HTTP_502_BAD_GATEWAY


class TestSaveInteractionLogTask:
    """Celery 写库任务（直接同步调用）"""

    def test_task_persists_event(self):
        engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        Base.metadata.create_all(bind=engine)
        TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        payload = InteractionLogCreate(
            session_id=SESSION_ID,
            event_type=InteractionEventType.EDIT,
            essay_text="Draft text.",
            timestamp=utc_now(),
        ).model_dump(mode="json")

        with patch.object(db_tasks, "SessionLocal", TestingSessionLocal):
            saved_id = db_tasks.save_interaction_log_task(payload)

        assert saved_id is not None
        from app.services.interaction_log_source import SqlInteractionLogRepository
        db = TestingSessionLocal()
        try:
            [log] = SqlInteractionLogRepository(db).get_session_logs(SESSION_ID)
            assert log.id == saved_id
            assert log.essay_text == "Draft text."
        finally:
            db.close()
            engine.dispose()
