"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from jasaoseo.clients.llm_client import LLMClient, LLMResponse
from jasaoseo.models.inputs import PipelineInput
from jasaoseo.storage.user_store import UserStore


@pytest.fixture
def sample_job_posting() -> str:
    return """[네이버] 백엔드 개발자 (경력 3-5년)

주요업무:
- 대규모 트래픽 처리를 위한 서버 개발
- RESTful API 설계 및 구현

자격요건:
- Java/Kotlin 기반 서버 개발 경력 3년 이상
- MySQL, Redis 활용 경험
"""


@pytest.fixture
def sample_user_info() -> str:
    return """홍길동
- ABC 테크 (2021.03 ~ 현재) 백엔드 개발자
  - Spring Boot 기반 API 서버 개발 (일 100만 리퀘스트)
  - MySQL 쿼리 최적화로 응답 시간 40% 개선
- 한국대학교 컴퓨터공학과 학사
"""


@pytest.fixture
def sample_input(sample_job_posting, sample_user_info) -> PipelineInput:
    return PipelineInput(
        job_role="it",
        job_posting=sample_job_posting,
        user_info=sample_user_info,
        questions="1. 지원동기를 작성해주세요 (1,000자 이내)",
    )


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(
            text="결과", input_tokens=100, output_tokens=50, model="claude-sonnet-4-6"
        )
    )
    client.generate_structured = AsyncMock(
        return_value=LLMResponse(
            text="",
            input_tokens=40,
            output_tokens=10,
            model="claude-haiku-4-5-20251001",
            data={"issues": []},
        )
    )
    return client


@pytest.fixture
def structured_response():
    """Factory for a generate_structured() result carrying ``data``."""

    def _make(data: dict, input_tokens: int = 40, output_tokens: int = 10) -> LLMResponse:
        return LLMResponse(
            text="",
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model="claude-haiku-4-5-20251001",
            data=data,
        )

    return _make


@pytest.fixture
def user_store(tmp_path) -> UserStore:
    return UserStore(tmp_path / "test.db")


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 3, 15, 12, 0)
