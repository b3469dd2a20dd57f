"""Main pipeline orchestrator - runs the persona stages in order."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from jasaoseo.clients.llm_client import DEFAULT_MODEL, FAST_MODEL, LLMClient, LLMResponse
from jasaoseo.errors import PipelineError
from jasaoseo.models.inputs import PipelineInput
from jasaoseo.models.proofreading import ProofreadingIssue
from jasaoseo.pipeline.personas import job_label, job_logic_context
from jasaoseo.pipeline.proofreader import Proofreader
from jasaoseo.pipeline.stages import FIVE_STEP, PipelineVariant, Stage
from jasaoseo.pipeline.validation import validate_input

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    stage: str
    persona: str
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    search_count: int = 0

    @classmethod
    def from_response(cls, stage: str, persona: str, response: LLMResponse) -> StageResult:
        return cls(
            stage=stage,
            persona=persona,
            text=response.text,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            model=response.model,
            search_count=response.search_count,
        )


@dataclass
class PipelineResult:
    """Complete result from one pipeline run."""

    variant: str
    stages: list[StageResult]
    final_output: str
    analysis_report: str
    proofreading: list[ProofreadingIssue] | None = None
    revisions: list[StageResult] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    metadata: dict = field(default_factory=dict)

    @property
    def total_input_tokens(self) -> int:
        return sum(s.input_tokens for s in self.stages)

    @property
    def total_output_tokens(self) -> int:
        return sum(s.output_tokens for s in self.stages)

    @property
    def total_search_count(self) -> int:
        return sum(s.search_count for s in self.stages)

    @property
    def calls(self) -> list[tuple[str, int, int]]:
        return [(s.model, s.input_tokens, s.output_tokens) for s in self.stages]


class PipelineOrchestrator:
    """Runs a fixed, strictly sequential chain of persona calls.

    No retries: the first failing stage raises PipelineError and the
    remaining stages are never started.
    """

    def __init__(
        self,
        llm: LLMClient,
        *,
        variant: PipelineVariant = FIVE_STEP,
        model: str = DEFAULT_MODEL,
        fast_model: str = FAST_MODEL,
        thinking_budget: int = 16000,
        max_tokens: int = 8192,
    ):
        self.llm = llm
        self.variant = variant
        self.model = model
        self.thinking_budget = thinking_budget
        self.max_tokens = max_tokens
        self.proofreader = Proofreader(llm, model=fast_model)

    async def run(
        self,
        inputs: PipelineInput,
        *,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> PipelineResult:
        """Validate the input, then run every stage of the variant.

        Args:
            inputs: Immutable user input for this run.
            on_phase: Optional callback(stage_name, detail) for progress.

        Raises:
            InputValidationError: before any LLM call, if required fields are empty.
            PipelineError: if any stage fails.
        """
        validate_input(inputs)
        start = time.monotonic()

        def _notify(phase: str, detail: str = ""):
            if on_phase:
                on_phase(phase, detail)

        total = len(self.variant.stages)
        outputs: dict[str, str] = {}
        results: list[StageResult] = []
        proofreading: list[ProofreadingIssue] | None = None

        for i, stage in enumerate(self.variant.stages, 1):
            _notify(stage.name, f"{i}/{total}단계: {stage.status}")
            logger.info("Stage %d/%d: %s", i, total, stage.persona.name)
            prompt = stage.build_prompt(inputs, outputs)

            if stage.structured:
                proofreading, result = await self._run_proofreader(stage, prompt)
                results.append(result)
                continue

            result = await self._run_stage(stage, prompt, inputs)
            outputs[stage.name] = result.text
            results.append(result)

        elapsed = time.monotonic() - start
        _notify("done", f"완료! 소요: {elapsed:.1f}초")

        return PipelineResult(
            variant=self.variant.name,
            stages=results,
            final_output=outputs[self.variant.final_stage],
            analysis_report="\n\n".join(outputs[name] for name in self.variant.report_stages),
            proofreading=proofreading,
            elapsed_seconds=elapsed,
            metadata={"job_role": inputs.job_role},
        )

    async def call_persona(
        self,
        stage_name: str,
        system: str,
        prompt: str,
        job_role: str,
        *,
        use_search: bool = False,
        use_thinking: bool = True,
    ):
        """Single stage call with the role prefix and role-logic context attached."""
        try:
            return await self.llm.generate(
                prompt=f"[선택된 직무]: {job_label(job_role)}\n\n{prompt}",
                system=system,
                model=self.model,
                max_tokens=self.max_tokens,
                context=job_logic_context(job_role),
                use_search=use_search,
                thinking_budget=self.thinking_budget if use_thinking else None,
            )
        except Exception as e:
            logger.error("Stage %s failed", stage_name, exc_info=True)
            raise PipelineError(stage_name, str(e) or type(e).__name__) from e

    async def _run_stage(self, stage: Stage, prompt: str, inputs: PipelineInput) -> StageResult:
        response = await self.call_persona(
            stage.name,
            stage.persona.system,
            prompt,
            inputs.job_role,
            use_search=stage.allow_search and inputs.use_search_grounding,
            use_thinking=inputs.use_thinking_mode,
        )
        return StageResult.from_response(stage.name, stage.persona.name, response)

    async def _run_proofreader(
        self, stage: Stage, text: str
    ) -> tuple[list[ProofreadingIssue], StageResult]:
        try:
            issues, response = await self.proofreader.check(text)
        except Exception as e:
            logger.error("Stage %s failed", stage.name, exc_info=True)
            raise PipelineError(stage.name, str(e) or type(e).__name__) from e
        if response is None:
            return issues, StageResult(stage.name, stage.persona.name, "")
        return issues, StageResult.from_response(stage.name, stage.persona.name, response)
