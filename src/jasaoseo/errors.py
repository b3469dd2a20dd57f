"""Exceptions raised by the jasaoseo pipeline, credit gate and stores."""

from __future__ import annotations


class JasaoseoError(Exception):
    """Base class for all application errors."""


class InputValidationError(JasaoseoError):
    """Raised before a run when required input fields are missing.

    Attributes:
        missing_fields: Korean labels of the fields that must be filled in.
    """

    def __init__(self, missing_fields: list[str], message: str | None = None):
        self.missing_fields = list(missing_fields)
        if message is None:
            message = f"필수 입력 항목이 비어 있습니다: {', '.join(self.missing_fields)}"
        super().__init__(message)


class PipelineError(JasaoseoError):
    """Raised when a pipeline stage fails; the rest of the run is cancelled."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"{stage} 단계 실패: {message}")


class CreditDeniedError(JasaoseoError):
    """Raised when a user has no subscription, points or free quota left."""


class AuthError(JasaoseoError):
    """Raised on bad credentials, duplicate sign-up or an unknown user."""


class DocumentNotFoundError(JasaoseoError):
    """Raised when a saved document does not exist for the given user."""

    def __init__(self, user_id: str, document_id: str):
        self.user_id = user_id
        self.document_id = document_id
        super().__init__(f"문서를 찾을 수 없습니다: {document_id}")
