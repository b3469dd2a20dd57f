"""Tests for fetching a job posting by URL."""

import threading
from unittest.mock import AsyncMock, patch

import pytest

from jasaoseo.clients.llm_client import LLMResponse
from jasaoseo.parsers.posting_fetcher import fetch_job_posting
from jasaoseo.utils.url_validator import SSRFError


class TestFetchJobPosting:
    async def test_returns_extracted_text(self, mock_llm_client):
        mock_llm_client.generate = AsyncMock(
            return_value=LLMResponse(
                text="  백엔드 개발자 채용\n자격요건...  ",
                input_tokens=1,
                output_tokens=1,
                search_count=1,
            )
        )
        with patch("jasaoseo.parsers.posting_fetcher.validate_url", side_effect=lambda u: u):
            response = await fetch_job_posting(mock_llm_client, "https://example.com/jobs/1")

        assert response.text == "백엔드 개발자 채용\n자격요건..."
        assert response.search_count == 1
        kwargs = mock_llm_client.generate.await_args.kwargs
        assert kwargs["use_search"] is True
        assert "temperature" not in kwargs
        assert "https://example.com/jobs/1" in kwargs["prompt"]

    async def test_url_check_runs_off_the_event_loop(self, mock_llm_client):
        loop_thread = threading.get_ident()
        seen = []

        def _check(url):
            seen.append(threading.get_ident())
            return url

        with patch("jasaoseo.parsers.posting_fetcher.validate_url", side_effect=_check):
            await fetch_job_posting(mock_llm_client, "https://example.com/jobs/1")

        assert len(seen) == 1
        assert seen[0] != loop_thread

    @pytest.mark.parametrize("url", ["", "example.com/jobs", "ftp://example.com"])
    async def test_rejects_non_http(self, mock_llm_client, url):
        with pytest.raises(ValueError, match="유효한 URL"):
            await fetch_job_posting(mock_llm_client, url)
        mock_llm_client.generate.assert_not_awaited()

    async def test_blocks_internal_url(self, mock_llm_client):
        with pytest.raises(SSRFError):
            await fetch_job_posting(mock_llm_client, "http://127.0.0.1/jobs")
        mock_llm_client.generate.assert_not_awaited()

    async def test_empty_result(self, mock_llm_client):
        mock_llm_client.generate = AsyncMock(
            return_value=LLMResponse(text="  ", input_tokens=1, output_tokens=1)
        )
        with patch("jasaoseo.parsers.posting_fetcher.validate_url", side_effect=lambda u: u):
            with pytest.raises(ValueError, match="추출하지 못했습니다"):
                await fetch_job_posting(mock_llm_client, "https://example.com/jobs/1")
