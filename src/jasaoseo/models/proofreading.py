"""Pydantic models for Proofreader output."""

from __future__ import annotations

from pydantic import BaseModel


class ProofreadingIssue(BaseModel):
    original: str
    corrected: str
    reason: str


PROOFREADING_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "issues": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "original": {"type": "string"},
                    "corrected": {"type": "string"},
                    "reason": {"type": "string"},
                },
                "required": ["original", "corrected", "reason"],
            },
        },
    },
    "required": ["issues"],
}
