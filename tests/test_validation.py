"""Tests for pre-run input validation."""

import pytest

from jasaoseo.errors import InputValidationError
from jasaoseo.models.inputs import AttachedFile, PipelineInput
from jasaoseo.pipeline.validation import missing_fields, validate_input


class TestValidation:
    def test_complete_input_passes(self, sample_input):
        assert missing_fields(sample_input) == []
        validate_input(sample_input)

    @pytest.mark.parametrize(
        "field,label",
        [
            ("job_role", "직무 선택"),
            ("job_posting", "채용 공고"),
            ("user_info", "사용자 정보(텍스트 또는 파일)"),
            ("questions", "자소서 문항"),
        ],
    )
    def test_each_missing_field_blocks(self, sample_input, field, label):
        inputs = sample_input.model_copy(update={field: "   "})
        with pytest.raises(InputValidationError) as exc_info:
            validate_input(inputs)
        assert exc_info.value.missing_fields == [label]

    def test_all_missing(self):
        assert len(missing_fields(PipelineInput())) == 4

    def test_draft_is_optional(self, sample_input):
        assert sample_input.initial_draft == ""
        validate_input(sample_input)

    def test_user_info_file_satisfies_requirement(self, sample_input):
        inputs = sample_input.model_copy(
            update={
                "user_info": "",
                "attached_files": (
                    AttachedFile(name="cv.pdf", content="경력", category="user_info"),
                ),
            }
        )
        validate_input(inputs)

    def test_draft_file_does_not_satisfy_user_info(self, sample_input):
        inputs = sample_input.model_copy(
            update={
                "user_info": "",
                "attached_files": (
                    AttachedFile(name="draft.txt", content="초안", category="initial_draft"),
                ),
            }
        )
        assert missing_fields(inputs) == ["사용자 정보(텍스트 또는 파일)"]

    def test_unknown_job_role(self, sample_input):
        inputs = sample_input.model_copy(update={"job_role": "astronaut"})
        with pytest.raises(InputValidationError, match="지원하지 않는 직무"):
            validate_input(inputs)

    def test_too_many_files(self, sample_input):
        files = tuple(
            AttachedFile(name=f"{i}.txt", content="x", category="initial_draft")
            for i in range(6)
        )
        inputs = sample_input.model_copy(update={"attached_files": files})
        with pytest.raises(InputValidationError, match="최대 5개"):
            validate_input(inputs)

    def test_message_lists_fields(self):
        err = InputValidationError(["채용 공고", "자소서 문항"])
        assert str(err) == "필수 입력 항목이 비어 있습니다: 채용 공고, 자소서 문항"
