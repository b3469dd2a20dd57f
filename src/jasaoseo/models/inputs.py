"""Pydantic models for the user-supplied pipeline input."""

from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FileCategory = Literal["user_info", "initial_draft"]

MAX_FILES_PER_CATEGORY = 5


class AttachedFile(BaseModel):
    """Text extracted from a file the user attached to one input field."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    content: str
    category: FileCategory


class PipelineInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    job_role: str = ""  # JobOption key, e.g. "it"
    job_posting: str = ""
    user_info: str = ""
    questions: str = ""
    initial_draft: str = ""
    attached_files: tuple[AttachedFile, ...] = ()
    use_search_grounding: bool = False
    use_thinking_mode: bool = True

    def files_in(self, category: FileCategory) -> list[AttachedFile]:
        return [f for f in self.attached_files if f.category == category]

    def full_user_info(self) -> str:
        """Typed background text followed by every attached user-info file."""
        return _combine(self.user_info, self.files_in("user_info"))

    def full_initial_draft(self) -> str:
        return _combine(self.initial_draft, self.files_in("initial_draft"))


def _combine(text: str, files: list[AttachedFile]) -> str:
    file_content = "\n\n".join(f"[첨부파일: {f.name}]\n{f.content}" for f in files)
    return f"{text}\n\n{file_content}".strip()
