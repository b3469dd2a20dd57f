"""Application service used by the Streamlit app and the CLI.

A generation run goes: validate input -> check credit -> run pipeline ->
charge credit -> log usage. Nothing is charged when the run fails.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime

from jasaoseo.clients.llm_client import LLMClient
from jasaoseo.config import AppConfig
from jasaoseo.credit.gate import CreditGate
from jasaoseo.errors import JasaoseoError
from jasaoseo.logging.cost_calculator import calculate_cost
from jasaoseo.logging.models import UsageLog, UsageMode
from jasaoseo.logging.usage_store import UsageStore
from jasaoseo.models.inputs import PipelineInput
from jasaoseo.models.proofreading import ProofreadingIssue
from jasaoseo.parsers.posting_fetcher import fetch_job_posting
from jasaoseo.pipeline.orchestrator import PipelineOrchestrator, PipelineResult
from jasaoseo.pipeline.revision import RevisionHandler
from jasaoseo.pipeline.stages import get_variant
from jasaoseo.pipeline.validation import validate_input
from jasaoseo.storage.document_store import DocumentStore
from jasaoseo.storage.user_store import UserStore

logger = logging.getLogger(__name__)


class JasaoseoService:
    def __init__(
        self,
        config: AppConfig,
        llm: LLMClient,
        *,
        users: UserStore | None = None,
        documents: DocumentStore | None = None,
        usage: UsageStore | None = None,
    ):
        db_path = config.storage.resolved_db_path
        self.config = config
        self.llm = llm
        self.users = users or UserStore(db_path)
        self.documents = documents or DocumentStore(db_path)
        self.usage = usage or UsageStore(db_path.with_name("usage.db"))
        self.gate = CreditGate(self.users, free_monthly_limit=config.credit.free_monthly_limit)
        self.orchestrator = PipelineOrchestrator(
            llm,
            variant=get_variant(config.pipeline.variant),
            model=config.llm.model,
            fast_model=config.llm.fast_model,
            thinking_budget=config.llm.thinking_budget,
            max_tokens=config.llm.max_tokens,
        )
        self.revisions = RevisionHandler(self.orchestrator)

    async def generate(
        self,
        uid: str,
        inputs: PipelineInput,
        *,
        on_phase=None,
        now: datetime | None = None,
    ) -> PipelineResult:
        """Run the full pipeline for a signed-in user.

        Raises InputValidationError before anything else, CreditDeniedError
        before any LLM call, and PipelineError if a stage fails.
        """
        validate_input(inputs)
        self.gate.check(uid, now)

        try:
            result = await self.orchestrator.run(inputs, on_phase=on_phase)
        except JasaoseoError as e:
            self._log_failure(uid, "generate", inputs, e)
            raise

        balance = self.gate.remaining(uid, now)
        self.gate.consume(uid, now)
        self._log(
            uid,
            "generate",
            inputs,
            stage_count=len(result.stages),
            elapsed=result.elapsed_seconds,
            calls=result.calls,
            search_count=result.total_search_count,
            credit_type=balance.type,
        )
        return result

    async def revise(
        self,
        uid: str,
        result: PipelineResult,
        request: str,
        inputs: PipelineInput,
        *,
        now: datetime | None = None,
    ) -> PipelineResult:
        """Re-run the final persona on ``result`` with the user's request."""
        charge = self.config.pipeline.revision_consumes_credit
        if charge:
            self.gate.check(uid, now)

        start = time.monotonic()
        try:
            await self.revisions.apply(result, request, inputs)
        except JasaoseoError as e:
            self._log_failure(uid, "revise", inputs, e)
            raise

        revision = result.revisions[-1]
        credit_type = None
        if charge:
            credit_type = self.gate.remaining(uid, now).type
            self.gate.consume(uid, now)
        self._log(
            uid,
            "revise",
            inputs,
            stage_count=1,
            elapsed=time.monotonic() - start,
            calls=[(revision.model, revision.input_tokens, revision.output_tokens)],
            search_count=revision.search_count,
            credit_type=credit_type,
        )
        return result

    async def proofread(self, uid: str, text: str) -> list[ProofreadingIssue]:
        start = time.monotonic()
        issues, response = await self.orchestrator.proofreader.check(text)
        self._log(
            uid,
            "proofread",
            None,
            stage_count=1,
            elapsed=time.monotonic() - start,
            calls=[response.call] if response else [],
        )
        return issues

    async def fetch_posting(self, uid: str, url: str) -> str:
        start = time.monotonic()
        response = await fetch_job_posting(self.llm, url, model=self.config.llm.model)
        self._log(
            uid,
            "fetch_posting",
            None,
            stage_count=1,
            elapsed=time.monotonic() - start,
            calls=[response.call],
            search_count=response.search_count,
        )
        return response.text

    def _log(
        self,
        uid: str,
        mode: UsageMode,
        inputs: PipelineInput | None,
        *,
        stage_count: int = 0,
        elapsed: float = 0.0,
        calls: list[tuple[str, int, int]] | None = None,
        search_count: int = 0,
        credit_type: str | None = None,
        error: str | None = None,
    ) -> None:
        """Save one usage row built from this action's own calls."""
        calls = calls or []
        log = UsageLog(
            user_id=uid,
            mode=mode,
            variant=self.orchestrator.variant.name,
            job_role=inputs.job_role if inputs else None,
            stage_count=stage_count,
            elapsed_seconds=elapsed,
            total_input_tokens=sum(c[1] for c in calls),
            total_output_tokens=sum(c[2] for c in calls),
            estimated_cost_usd=calculate_cost(calls, search_count=search_count),
            credit_type=credit_type,
            success=error is None,
            error_message=error,
        )
        try:
            self.usage.save_log(log)
        except Exception:
            logger.exception("Failed to save usage log")

    def _log_failure(
        self, uid: str, mode: UsageMode, inputs: PipelineInput, error: Exception
    ) -> None:
        self._log(uid, mode, inputs, error=str(error))
