"""Usage logging data models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

UsageMode = Literal["generate", "revise", "proofread", "fetch_posting"]


class UsageLog(BaseModel):
    """Single usage log entry for one pipeline action."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str = "anonymous"
    timestamp: datetime = Field(default_factory=datetime.now)
    mode: UsageMode
    variant: str | None = None  # "five_step" | "four_step"
    job_role: str | None = None
    stage_count: int = 0
    elapsed_seconds: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    credit_type: str | None = None  # balance type charged: unlimited/points/free
    success: bool = True
    error_message: str | None = None
