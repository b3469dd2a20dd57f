"""Proofreader - reports spelling and grammar fixes as structured issues."""

from __future__ import annotations

import logging

from jasaoseo.clients.llm_client import FAST_MODEL, LLMClient, LLMResponse
from jasaoseo.models.proofreading import PROOFREADING_SCHEMA, ProofreadingIssue
from jasaoseo.pipeline.personas import PROOFREADER

logger = logging.getLogger(__name__)

TOOL_NAME = "report_proofreading_issues"


class Proofreader:
    def __init__(self, llm: LLMClient, model: str = FAST_MODEL):
        self.llm = llm
        self.model = model

    async def proofread(self, text: str) -> list[ProofreadingIssue]:
        """Return the issues found in ``text``; an empty text has none."""
        issues, _ = await self.check(text)
        return issues

    async def check(self, text: str) -> tuple[list[ProofreadingIssue], LLMResponse | None]:
        """Like ``proofread`` but also return the call's usage (None when skipped)."""
        if not text or not text.strip():
            return [], None

        logger.info("Proofreading %d characters...", len(text))
        response = await self.llm.generate_structured(
            prompt=text,
            schema=PROOFREADING_SCHEMA,
            tool_name=TOOL_NAME,
            system=PROOFREADER.system,
            model=self.model,
        )

        issues = (response.data or {}).get("issues", [])
        if not isinstance(issues, list):
            raise ValueError(f"Expected list of issues, got {type(issues).__name__}")
        return [ProofreadingIssue(**item) for item in issues], response

    @staticmethod
    def apply(text: str, issues: list[ProofreadingIssue]) -> str:
        """Replace the first occurrence of each original phrase with its correction."""
        for issue in issues:
            if issue.original and issue.original in text:
                text = text.replace(issue.original, issue.corrected, 1)
        return text
