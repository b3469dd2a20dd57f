"""Pydantic models for saved cover-letter snapshots."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from jasaoseo.models.inputs import PipelineInput

DEFAULT_TITLE = "제목 없음"


class SavedDocument(BaseModel):
    id: str
    title: str = DEFAULT_TITLE
    job_role: str = ""
    job_posting: str = ""
    user_info: str = ""
    questions: str = ""
    initial_draft: str = ""
    final_output: str = ""
    analysis_report: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def to_input(self, **options) -> PipelineInput:
        """Rebuild the pipeline input this snapshot was made from (without attachments)."""
        return PipelineInput(
            job_role=self.job_role,
            job_posting=self.job_posting,
            user_info=self.user_info,
            questions=self.questions,
            initial_draft=self.initial_draft,
            **options,
        )
