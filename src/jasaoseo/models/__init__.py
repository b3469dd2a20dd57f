"""Data models for the jasaoseo pipeline."""

from jasaoseo.models.document import SavedDocument
from jasaoseo.models.inputs import AttachedFile, PipelineInput
from jasaoseo.models.proofreading import ProofreadingIssue
from jasaoseo.models.user import CreditBalance, UserProfile

__all__ = [
    "AttachedFile",
    "CreditBalance",
    "PipelineInput",
    "ProofreadingIssue",
    "SavedDocument",
    "UserProfile",
]
