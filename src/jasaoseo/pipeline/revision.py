"""Revision - re-runs only the final writing persona on a user request."""

from __future__ import annotations

import logging

from jasaoseo.errors import InputValidationError
from jasaoseo.models.inputs import PipelineInput
from jasaoseo.pipeline.orchestrator import PipelineOrchestrator, PipelineResult, StageResult
from jasaoseo.pipeline.stages import revision_prompt

logger = logging.getLogger(__name__)


class RevisionHandler:
    def __init__(self, orchestrator: PipelineOrchestrator):
        self.orchestrator = orchestrator

    async def revise(
        self,
        current_output: str,
        request: str,
        inputs: PipelineInput,
    ) -> StageResult:
        """Return the revised cover letter with the call's usage.

        The prior output is passed as the draft and the request as the
        strategy. Raises InputValidationError on an empty request and
        PipelineError if the call fails.
        """
        if not request or not request.strip():
            raise InputValidationError(["수정 요청사항"], "수정 요청사항을 입력해주세요.")

        persona = self.orchestrator.variant.revision_persona
        logger.info("Revising with %s persona", persona.name)
        response = await self.orchestrator.call_persona(
            "revision",
            persona.system,
            revision_prompt(current_output, request, inputs.full_user_info()),
            inputs.job_role,
            use_thinking=inputs.use_thinking_mode,
        )
        return StageResult.from_response("revision", persona.name, response)

    async def apply(
        self,
        result: PipelineResult,
        request: str,
        inputs: PipelineInput,
    ) -> PipelineResult:
        """Revise ``result`` in place; the analysis report is left untouched."""
        revision = await self.revise(result.final_output, request, inputs)
        result.final_output = revision.text
        result.revisions.append(revision)
        result.metadata["revisions"] = result.metadata.get("revisions", 0) + 1
        return result
