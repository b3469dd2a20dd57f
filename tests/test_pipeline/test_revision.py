"""Tests for single-persona revision."""

from unittest.mock import AsyncMock

import pytest

from jasaoseo.clients.llm_client import LLMResponse
from jasaoseo.errors import InputValidationError, PipelineError
from jasaoseo.pipeline import personas
from jasaoseo.pipeline.orchestrator import PipelineOrchestrator, PipelineResult
from jasaoseo.pipeline.revision import RevisionHandler
from jasaoseo.pipeline.stages import FOUR_STEP


@pytest.fixture
def prior_result() -> PipelineResult:
    return PipelineResult(
        variant="five_step",
        stages=[],
        final_output="기존 자소서",
        analysis_report="기존 리포트",
    )


class TestRevision:
    async def test_single_editor_call(self, mock_llm_client, sample_input, prior_result):
        mock_llm_client.generate = AsyncMock(
            return_value=LLMResponse(text="수정된 자소서", input_tokens=10, output_tokens=5)
        )
        handler = RevisionHandler(PipelineOrchestrator(mock_llm_client))

        result = await handler.apply(prior_result, "더 간결하게", sample_input)

        assert mock_llm_client.generate.await_count == 1
        call = mock_llm_client.generate.await_args
        assert call.kwargs["system"] == personas.EDITOR.system
        assert "기존 자소서" in call.kwargs["prompt"]
        assert "더 간결하게" in call.kwargs["prompt"]
        assert result.final_output == "수정된 자소서"
        assert result.analysis_report == "기존 리포트"
        assert result.metadata["revisions"] == 1
        assert result.revisions[0].text == "수정된 자소서"
        assert (result.revisions[0].input_tokens, result.revisions[0].output_tokens) == (10, 5)
        assert result.stages == []

    async def test_four_step_uses_reviser(self, mock_llm_client, sample_input):
        handler = RevisionHandler(PipelineOrchestrator(mock_llm_client, variant=FOUR_STEP))
        revision = await handler.revise("초안", "수치 보강", sample_input)

        assert mock_llm_client.generate.await_args.kwargs["system"] == personas.REVISER.system
        assert revision.persona == personas.REVISER.name

    async def test_never_searches(self, mock_llm_client, sample_input):
        inputs = sample_input.model_copy(update={"use_search_grounding": True})
        handler = RevisionHandler(PipelineOrchestrator(mock_llm_client))
        await handler.revise("초안", "수정", inputs)

        assert mock_llm_client.generate.await_args.kwargs["use_search"] is False

    async def test_empty_request_rejected(self, mock_llm_client, sample_input):
        handler = RevisionHandler(PipelineOrchestrator(mock_llm_client))
        with pytest.raises(InputValidationError):
            await handler.revise("초안", "  ", sample_input)
        mock_llm_client.generate.assert_not_awaited()

    async def test_failure_keeps_previous_output(self, mock_llm_client, sample_input, prior_result):
        mock_llm_client.generate = AsyncMock(side_effect=RuntimeError("timeout"))
        handler = RevisionHandler(PipelineOrchestrator(mock_llm_client))

        with pytest.raises(PipelineError):
            await handler.apply(prior_result, "수정", sample_input)
        assert prior_result.final_output == "기존 자소서"
        assert "revisions" not in prior_result.metadata
        assert prior_result.revisions == []
