"""Streamlit Web UI for jasaoseo.

Sign in, fill the form (job role, posting, background, questions, optional
draft and attachments), run the multi-persona pipeline, then revise,
proofread and save the result.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so backend clients can read them
for key in ("ANTHROPIC_API_KEY",):
    if key not in os.environ:
        try:
            os.environ[key] = st.secrets[key]
        except Exception:
            pass

from jasaoseo.auth import AuthService
from jasaoseo.clients.llm_client import LLMClient
from jasaoseo.config import load_config
from jasaoseo.errors import CreditDeniedError, InputValidationError, JasaoseoError
from jasaoseo.models.inputs import MAX_FILES_PER_CATEGORY, PipelineInput
from jasaoseo.parsers.file_parser import DOCUMENT_SUFFIXES, IMAGE_MEDIA_TYPES, read_attachment
from jasaoseo.pipeline.personas import JOB_OPTIONS
from jasaoseo.pipeline.proofreader import Proofreader
from jasaoseo.service import JasaoseoService

UPLOAD_TYPES = [s.lstrip(".") for s in DOCUMENT_SUFFIXES + tuple(IMAGE_MEDIA_TYPES)]
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="AI 자소서 코치",
    page_icon=":memo:",
    layout="wide",
)


@st.cache_resource
def _get_service() -> JasaoseoService:
    config = load_config()
    try:
        llm = LLMClient(timeout=config.llm.timeout)
    except Exception as e:
        raise RuntimeError(f"LLM 클라이언트 초기화 실패. ANTHROPIC_API_KEY를 확인하세요: {e}") from e
    return JasaoseoService(config, llm)


service = _get_service()
auth = AuthService(service.users)

# ---------------------------------------------------------------------------
# Sign in / sign up
# ---------------------------------------------------------------------------

if "uid" not in st.session_state:
    st.markdown("## AI 자소서 코치")
    tab_in, tab_up = st.tabs(["로그인", "회원가입"])
    with tab_in:
        with st.form("sign_in"):
            email = st.text_input("이메일")
            password = st.text_input("비밀번호", type="password")
            if st.form_submit_button("로그인", type="primary"):
                try:
                    st.session_state.uid = auth.sign_in(email, password).uid
                    st.rerun()
                except JasaoseoError as e:
                    st.error(str(e))
    with tab_up:
        with st.form("sign_up"):
            name = st.text_input("이름 (선택)")
            email = st.text_input("이메일")
            password = st.text_input("비밀번호 (6자 이상)", type="password")
            if st.form_submit_button("가입하기", type="primary"):
                try:
                    st.session_state.uid = auth.sign_up(email, password, display_name=name or None).uid
                    st.rerun()
                except JasaoseoError as e:
                    st.error(str(e))
    st.stop()

uid: str = st.session_state.uid

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _balance_label() -> str:
    balance = service.gate.remaining(uid)
    if balance.is_unlimited:
        return "Pro 구독 중 (무제한)"
    if balance.type == "points":
        return f"포인트 {balance.count}개"
    return f"이번 달 무료 {balance.count}회 남음"


def _show_pricing() -> None:
    st.warning("이번 달 무료 사용 횟수를 모두 사용했습니다. Pro 구독으로 무제한 이용하세요.")
    col1, col2 = st.columns(2)
    col1.metric("월간", "₩9,900", help="매월 결제")
    col2.metric("연간", "₩79,000", delta="33% 할인", help="월 ₩6,583")


def _read_uploads(uploads, category) -> list | None:
    """Parse uploaded files into AttachedFile objects, or None on error."""
    if len(uploads) > MAX_FILES_PER_CATEGORY:
        st.error(f"파일은 최대 {MAX_FILES_PER_CATEGORY}개까지 첨부할 수 있습니다.")
        return None
    attached = []
    for upload in uploads:
        if upload.size > MAX_UPLOAD_BYTES:
            st.error(f"{upload.name}: 파일 크기가 10MB를 초과합니다.")
            return None
        try:
            attached.append(
                asyncio.run(read_attachment(upload.getvalue(), upload.name, category, service.llm))
            )
        except Exception:
            logger.exception("Attachment parsing failed: %s", upload.name)
            st.error(f"{upload.name}: 파일에서 텍스트를 추출하지 못했습니다.")
            return None
    return attached


def _clear_result() -> None:
    for key in ("pipeline_result", "pipeline_input", "proofreading", "document_id"):
        st.session_state.pop(key, None)


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("AI 자소서 코치")
    profile = service.gate.load(uid)
    st.caption(profile.display_name or profile.email)
    st.info(_balance_label())
    if st.button("로그아웃"):
        st.session_state.clear()
        st.rerun()

    st.divider()
    st.subheader("내 문서")
    documents = service.documents.list_documents(uid)
    if not documents:
        st.caption("저장된 문서가 없습니다.")
    for doc in documents:
        with st.expander(f"{doc.title} · {doc.updated_at:%Y-%m-%d}"):
            col_load, col_del = st.columns(2)
            if col_load.button("불러오기", key=f"load_{doc.id}"):
                _clear_result()
                st.session_state.form_role = doc.job_role
                st.session_state.form_posting = doc.job_posting
                st.session_state.form_info = doc.user_info
                st.session_state.form_questions = doc.questions
                st.session_state.form_draft = doc.initial_draft
                st.session_state.loaded_document = doc
                st.session_state.document_id = doc.id
                st.rerun()
            if col_del.button("삭제", key=f"del_{doc.id}"):
                service.documents.delete(uid, doc.id)
                if st.session_state.get("document_id") == doc.id:
                    _clear_result()
                st.rerun()

# ---------------------------------------------------------------------------
# Input form
# ---------------------------------------------------------------------------

st.header("자기소개서 생성")

role_keys = list(JOB_OPTIONS)
form_role = st.session_state.get("form_role")
job_role = st.selectbox(
    "직무 선택",
    role_keys,
    index=role_keys.index(form_role) if form_role in role_keys else 0,
    format_func=lambda k: JOB_OPTIONS[k].label,
)

with st.expander("URL로 채용 공고 가져오기", expanded=False):
    posting_url = st.text_input("채용 공고 URL", placeholder="https://...")
    if st.button("가져오기", disabled=not posting_url):
        with st.spinner("채용 공고 가져오는 중..."):
            try:
                st.session_state.form_posting = asyncio.run(service.fetch_posting(uid, posting_url))
            except ValueError as e:
                st.error(str(e))
            except Exception:
                logger.exception("Job posting fetch failed")
                st.error("URL에서 내용을 가져오는 데 실패했습니다. 내용을 직접 붙여넣어 주세요.")
            else:
                st.rerun()

job_posting = st.text_area("채용 공고", key="form_posting", height=200, max_chars=20000)

user_info = st.text_area(
    "사용자 정보",
    key="form_info",
    height=200,
    placeholder="경력, 프로젝트, 성과 등 자소서에 활용할 경험을 적어주세요.",
    max_chars=20000,
)
info_uploads = st.file_uploader(
    f"사용자 정보 파일 (최대 {MAX_FILES_PER_CATEGORY}개)",
    type=UPLOAD_TYPES,
    accept_multiple_files=True,
    key="info_uploads",
)

questions = st.text_area(
    "자소서 문항",
    key="form_questions",
    height=120,
    placeholder="예:\n1. 지원동기를 작성해주세요 (1,000자 이내)",
    max_chars=5000,
)

initial_draft = st.text_area("초안 (선택)", key="form_draft", height=150, max_chars=20000)
draft_uploads = st.file_uploader(
    f"초안 파일 (최대 {MAX_FILES_PER_CATEGORY}개)",
    type=UPLOAD_TYPES,
    accept_multiple_files=True,
    key="draft_uploads",
)

col_a, col_b = st.columns(2)
use_search = col_a.checkbox("웹 검색으로 채용 정보 보강", value=False)
use_thinking = col_b.checkbox("심층 분석 모드", value=True)

if st.button("자소서 생성", type="primary"):
    info_files = _read_uploads(info_uploads or [], "user_info")
    draft_files = _read_uploads(draft_uploads or [], "initial_draft")
    if info_files is None or draft_files is None:
        st.stop()

    inputs = PipelineInput(
        job_role=job_role,
        job_posting=job_posting,
        user_info=user_info,
        questions=questions,
        initial_draft=initial_draft,
        attached_files=tuple(info_files + draft_files),
        use_search_grounding=use_search,
        use_thinking_mode=use_thinking,
    )

    _clear_result()
    stage_count = len(service.orchestrator.variant.stages)
    progress_bar = st.progress(0, text="준비 중...")

    def on_phase(phase: str, detail: str):
        if phase == "done":
            progress_bar.progress(1.0, text=detail or "완료!")
            return
        step = int(detail.split("/", 1)[0]) if "/" in detail else 0
        progress_bar.progress(max(step - 1, 0) / stage_count, text=detail)

    try:
        result = asyncio.run(service.generate(uid, inputs, on_phase=on_phase))
    except InputValidationError as e:
        st.error(str(e))
        st.stop()
    except CreditDeniedError:
        _show_pricing()
        st.stop()
    except JasaoseoError as e:
        logger.exception("Cover letter pipeline failed")
        st.error(f"{e}. 잠시 후 다시 시도해주세요.")
        st.stop()

    progress_bar.progress(1.0, text=f"완료! 소요: {result.elapsed_seconds:.1f}초")
    st.session_state.pipeline_result = result
    st.session_state.pipeline_input = inputs
    if result.proofreading is not None:
        st.session_state.proofreading = result.proofreading
    st.rerun()

# ---------------------------------------------------------------------------
# Loaded document -> result view
# ---------------------------------------------------------------------------

if "loaded_document" in st.session_state and "pipeline_result" not in st.session_state:
    from jasaoseo.pipeline.orchestrator import PipelineResult

    doc = st.session_state.pop("loaded_document")
    st.session_state.pipeline_result = PipelineResult(
        variant=service.orchestrator.variant.name,
        stages=[],
        final_output=doc.final_output,
        analysis_report=doc.analysis_report,
    )
    st.session_state.pipeline_input = doc.to_input(use_thinking_mode=use_thinking)

# ---------------------------------------------------------------------------
# Results (survive reruns via session_state)
# ---------------------------------------------------------------------------

if "pipeline_result" in st.session_state:
    result = st.session_state.pipeline_result
    inputs = st.session_state.pipeline_input

    st.divider()
    tab_final, tab_report, tab_proof = st.tabs(["최종 자소서", "분석 리포트", "맞춤법 검사"])

    with tab_final:
        st.markdown(result.final_output)
        st.download_button(
            label="TXT 다운로드",
            data=result.final_output.encode("utf-8"),
            file_name="자기소개서.txt",
            mime="text/plain",
        )

    with tab_report:
        if result.analysis_report:
            st.markdown(result.analysis_report)
        else:
            st.caption("분석 리포트가 없습니다.")

    with tab_proof:
        if st.button("맞춤법 검사 실행"):
            with st.spinner("맞춤법 검사 중..."):
                try:
                    st.session_state.proofreading = asyncio.run(
                        service.proofread(uid, result.final_output)
                    )
                except Exception:
                    logger.exception("Proofreading failed")
                    st.error("맞춤법 검사 API 호출에 실패했습니다.")
        issues = st.session_state.get("proofreading")
        if issues is not None:
            if not issues:
                st.success("발견된 오류가 없습니다.")
            for issue in issues:
                st.markdown(f"- ~~{issue.original}~~ → **{issue.corrected}**  \n  {issue.reason}")
            if issues and st.button("수정 사항 모두 적용"):
                result.final_output = Proofreader.apply(result.final_output, issues)
                st.session_state.proofreading = []
                st.rerun()

    st.subheader("수정 요청")
    request = st.text_area(
        "수정 요청사항",
        placeholder="예: 두 번째 문단을 더 구체적인 수치로 보강해주세요.",
        max_chars=2000,
    )
    if st.button("수정하기", disabled=not request.strip()):
        with st.spinner("수정 중..."):
            try:
                asyncio.run(service.revise(uid, result, request, inputs))
                st.session_state.pop("proofreading", None)
                st.rerun()
            except CreditDeniedError:
                _show_pricing()
            except JasaoseoError as e:
                logger.exception("Revision failed")
                st.error(f"수정 중 오류가 발생했습니다: {e}")

    st.subheader("저장")
    title = st.text_input("문서 제목", placeholder="제목 없음")
    if st.button("저장하기"):
        document_id = st.session_state.get("document_id")
        if document_id:
            service.documents.update(
                uid,
                document_id,
                title=title or None,
                final_output=result.final_output,
                analysis_report=result.analysis_report,
            )
        else:
            st.session_state.document_id = service.documents.save(
                uid, title, inputs, result.final_output, result.analysis_report
            )
        st.success("저장되었습니다.")
