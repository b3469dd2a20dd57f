"""Pre-run input checks. Nothing here touches the network."""

from __future__ import annotations

from jasaoseo.errors import InputValidationError
from jasaoseo.models.inputs import MAX_FILES_PER_CATEGORY, PipelineInput
from jasaoseo.pipeline.personas import JOB_OPTIONS


def missing_fields(inputs: PipelineInput) -> list[str]:
    """Return the labels of required fields that are still empty."""
    missing = []
    if not inputs.job_role.strip():
        missing.append("직무 선택")
    if not inputs.job_posting.strip():
        missing.append("채용 공고")
    if not inputs.user_info.strip() and not inputs.files_in("user_info"):
        missing.append("사용자 정보(텍스트 또는 파일)")
    if not inputs.questions.strip():
        missing.append("자소서 문항")
    return missing


def validate_input(inputs: PipelineInput) -> None:
    """Raise InputValidationError if the run must not start."""
    missing = missing_fields(inputs)
    if missing:
        raise InputValidationError(missing)

    if inputs.job_role not in JOB_OPTIONS:
        raise InputValidationError(
            ["직무 선택"], f"지원하지 않는 직무입니다: {inputs.job_role}"
        )

    for category in ("user_info", "initial_draft"):
        if len(inputs.files_in(category)) > MAX_FILES_PER_CATEGORY:
            raise InputValidationError(
                ["첨부 파일"],
                f"각 항목당 최대 {MAX_FILES_PER_CATEGORY}개의 파일만 업로드할 수 있습니다.",
            )
