"""Ordered stage definitions for the two pipeline variants.

A stage builds its user prompt from the immutable input and the outputs of
the stages before it, keyed by stage name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from jasaoseo.models.inputs import PipelineInput
from jasaoseo.pipeline import personas
from jasaoseo.pipeline.personas import Persona, job_label

PromptBuilder = Callable[[PipelineInput, dict[str, str]], str]


@dataclass(frozen=True)
class Stage:
    name: str
    persona: Persona
    status: str  # progress message shown while the stage runs
    build_prompt: PromptBuilder
    allow_search: bool = False
    structured: bool = False  # returns proofreading issues instead of text


@dataclass(frozen=True)
class PipelineVariant:
    name: str
    stages: tuple[Stage, ...]
    report_stages: tuple[str, ...]  # outputs joined into the analysis report
    final_stage: str  # stage whose text is the cover letter
    revision_persona: Persona


def revision_prompt(current_output: str, request: str, full_user_info: str) -> str:
    """Prompt for the revision persona; the user's request stands in for the strategy."""
    return f"""
[2단계 결과물]:
{current_output}

[4단계 수정 전략 (사용자 요청사항)]:
{request}

[사용자 배경 정보 원본]:
{full_user_info}
"""


# --- five_step -------------------------------------------------------------


def _architect_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    draft = inputs.full_initial_draft()
    draft_section = f"[사용자 제공 초안 (참고용)]:\n{draft}" if draft else ""
    return f"""
[필수 입력 데이터]
[선택된 직무]: {job_label(inputs.job_role)}
[사용자 배경 정보]:
{inputs.full_user_info()}

[채용 정보]:
{inputs.job_posting}

[문항 정보]:
{inputs.questions}

{draft_section}
"""


def _writer_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return f"""
[자기소개서 설계도]:
{outputs["architect"]}

[선택된 직무]: {job_label(inputs.job_role)}

[채용 정보]:
{inputs.job_posting}

[문항 정보]:
{inputs.questions}
"""


def _critic_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return f"""
[2단계 결과물]:
{outputs["writer"]}

[선택된 직무]: {job_label(inputs.job_role)}

[채용 공고(JD)]:
{inputs.job_posting}
"""


def _strategist_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return f"""
[2단계 결과물]:
{outputs["writer"]}

[3단계 비판 리포트]:
{outputs["critic"]}

[채용 공고(JD)]:
{inputs.job_posting}
"""


def _editor_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return f"""
[2단계 결과물]:
{outputs["writer"]}

[4단계 수정 전략]:
{outputs["strategist"]}

[사용자 배경 정보 원본]:
{inputs.full_user_info()}
"""


FIVE_STEP = PipelineVariant(
    name="five_step",
    stages=(
        Stage(
            "architect",
            personas.ARCHITECT,
            "AI 설계자가 경험을 분석하여 최적의 논리 구조를 설계 중입니다...",
            _architect_prompt,
            allow_search=True,
        ),
        Stage(
            "writer",
            personas.WRITER,
            "AI 작가가 설계도를 바탕으로 설득력 있는 초안을 작성 중입니다...",
            _writer_prompt,
        ),
        Stage(
            "critic",
            personas.CRITIC,
            "CTO급 AI 면접관이 초안을 냉정하게 평가 중입니다...",
            _critic_prompt,
        ),
        Stage(
            "strategist",
            personas.STRATEGIST,
            "AI 전략가가 합격을 위한 구체적인 수정 전략을 수립 중입니다...",
            _strategist_prompt,
        ),
        Stage(
            "editor",
            personas.EDITOR,
            "총괄 에디터가 전략을 반영하여 최종 자소서를 완성하고 팩트를 검증 중입니다...",
            _editor_prompt,
        ),
    ),
    report_stages=("critic", "strategist"),
    final_stage="editor",
    revision_persona=personas.EDITOR,
)


# --- four_step -------------------------------------------------------------


def _generator_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return _architect_prompt(inputs, outputs)


def _analyzer_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return f"""
[1단계 결과물]:
{outputs["generator"]}

[채용 공고(JD)]:
{inputs.job_posting}

[문항 정보]:
{inputs.questions}
"""


def _reviser_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return f"""
[1단계 결과물]:
{outputs["generator"]}

[2단계 분석 리포트]:
{outputs["analyzer"]}

[사용자 배경 정보 원본]:
{inputs.full_user_info()}
"""


def _proofreader_prompt(inputs: PipelineInput, outputs: dict[str, str]) -> str:
    return outputs["reviser"]


FOUR_STEP = PipelineVariant(
    name="four_step",
    stages=(
        Stage(
            "generator",
            personas.GENERATOR,
            "AI가 입력 정보를 바탕으로 자소서 초안을 작성 중입니다...",
            _generator_prompt,
            allow_search=True,
        ),
        Stage(
            "analyzer",
            personas.ANALYZER,
            "채용 담당자 관점에서 초안을 분석 중입니다...",
            _analyzer_prompt,
        ),
        Stage(
            "reviser",
            personas.REVISER,
            "분석 결과를 반영하여 자소서를 수정 중입니다...",
            _reviser_prompt,
        ),
        Stage(
            "proofreader",
            personas.PROOFREADER,
            "맞춤법과 문장을 검사 중입니다...",
            _proofreader_prompt,
            structured=True,
        ),
    ),
    report_stages=("analyzer",),
    final_stage="reviser",
    revision_persona=personas.REVISER,
)

VARIANTS: dict[str, PipelineVariant] = {v.name: v for v in (FIVE_STEP, FOUR_STEP)}


def get_variant(name: str) -> PipelineVariant:
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(f"Unknown pipeline variant: {name!r}") from None
