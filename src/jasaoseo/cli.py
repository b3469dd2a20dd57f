"""Command-line interface for jasaoseo (typer + rich)."""

from __future__ import annotations

import asyncio
import hmac
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from jasaoseo.auth import AuthService, normalize_email
from jasaoseo.clients.llm_client import LLMClient
from jasaoseo.config import load_config
from jasaoseo.errors import CreditDeniedError, JasaoseoError
from jasaoseo.models.inputs import PipelineInput
from jasaoseo.models.user import CreditBalance, UserProfile
from jasaoseo.parsers.file_parser import read_attachment
from jasaoseo.pipeline.orchestrator import PipelineResult
from jasaoseo.pipeline.personas import JOB_OPTIONS
from jasaoseo.service import JasaoseoService

app = typer.Typer(
    name="jasaoseo",
    help="AI 자기소개서 5단계 작성 파이프라인",
    no_args_is_help=True,
)
docs_app = typer.Typer(help="저장된 자소서 관리", no_args_is_help=True)
app.add_typer(docs_app, name="docs")
console = Console()

OPERATOR_KEY_ENV = "JASAOSEO_OPERATOR_KEY"


def _service() -> JasaoseoService:
    config = load_config()
    return JasaoseoService(config, LLMClient(timeout=config.llm.timeout))


def _sign_in(service: JasaoseoService, email: str) -> UserProfile:
    password = typer.prompt("비밀번호", hide_input=True)
    try:
        return AuthService(service.users).sign_in(email, password)
    except JasaoseoError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _operator_target(service: JasaoseoService, email: str) -> UserProfile:
    """Check the operator key, then look up the account being credited."""
    expected = os.environ.get(OPERATOR_KEY_ENV)
    if not expected:
        console.print(f"[red]운영자 전용 명령입니다. {OPERATOR_KEY_ENV}가 설정되지 않았습니다.[/red]")
        raise typer.Exit(1)
    given = typer.prompt("운영자 키", hide_input=True)
    if not hmac.compare_digest(given.encode(), expected.encode()):
        console.print("[red]운영자 키가 올바르지 않습니다.[/red]")
        raise typer.Exit(1)

    credentials = service.users.get_credentials(normalize_email(email))
    profile = service.users.get(credentials[0]) if credentials else None
    if profile is None:
        console.print(f"[red]가입되지 않은 이메일입니다: {email}[/red]")
        raise typer.Exit(1)
    return profile


def _read(path: Path | None) -> str:
    if path is None:
        return ""
    if not path.exists():
        console.print(f"[red]파일을 찾을 수 없습니다: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _format_balance(balance: CreditBalance) -> str:
    if balance.is_unlimited:
        return "Pro 구독 중 (무제한)"
    if balance.type == "points":
        return f"포인트 {balance.count}개"
    return f"무료 {balance.count}회 남음"


def _print_result(result: PipelineResult) -> None:
    console.print(Panel(result.final_output, title="최종 자기소개서", border_style="green"))
    if result.analysis_report:
        console.print(Panel(result.analysis_report, title="분석 리포트", border_style="blue"))
    if result.proofreading:
        table = Table(title=f"맞춤법 검사 ({len(result.proofreading)}건)")
        table.add_column("원문")
        table.add_column("수정")
        table.add_column("이유")
        for issue in result.proofreading:
            table.add_row(issue.original, issue.corrected, issue.reason)
        console.print(table)


@app.command()
def signup(
    email: str = typer.Argument(help="가입할 이메일"),
    name: str = typer.Option(None, "--name", help="표시 이름"),
) -> None:
    """이메일/비밀번호로 가입합니다."""
    service = _service()
    password = typer.prompt("비밀번호", hide_input=True, confirmation_prompt=True)
    try:
        profile = AuthService(service.users).sign_up(email, password, display_name=name)
    except JasaoseoError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]가입 완료: {profile.email}[/green]")


@app.command()
def credits(email: str = typer.Argument(help="로그인 이메일")) -> None:
    """남은 크레딧을 확인합니다."""
    service = _service()
    profile = _sign_in(service, email)
    console.print(_format_balance(service.gate.remaining(profile.uid)))


@app.command()
def generate(
    email: str = typer.Option(..., "--email", "-e", help="로그인 이메일"),
    role: str = typer.Option(..., "--role", "-r", help=f"직무: {', '.join(JOB_OPTIONS)}"),
    posting: Path = typer.Option(None, "--posting", help="채용 공고 텍스트 파일"),
    posting_url: str = typer.Option(None, "--posting-url", help="채용 공고 URL"),
    info: Path = typer.Option(None, "--info", help="사용자 배경 정보 텍스트 파일"),
    attach: list[Path] = typer.Option(None, "--attach", "-a", help="배경 정보 첨부 파일 (PDF/DOCX/TXT/이미지)"),
    questions: Path = typer.Option(..., "--questions", "-q", help="자소서 문항 텍스트 파일"),
    draft: Path = typer.Option(None, "--draft", help="참고용 초안 파일"),
    search: bool = typer.Option(False, "--search", help="설계 단계에서 웹 검색 사용"),
    thinking: bool = typer.Option(True, "--thinking/--no-thinking", help="심층 추론 모드"),
    title: str = typer.Option(None, "--save", help="이 제목으로 결과 저장"),
    output: Path = typer.Option(None, "--output", "-o", help="최종 자소서 저장 경로 (.md)"),
) -> None:
    """자기소개서를 설계, 작성, 비판, 전략 수립, 편집 단계로 생성합니다."""
    service = _service()
    profile = _sign_in(service, email)

    posting_text = _read(posting)
    if posting_url and not posting_text:
        with console.status("채용 공고 가져오는 중..."):
            try:
                posting_text = asyncio.run(service.fetch_posting(profile.uid, posting_url))
            except ValueError as e:
                console.print(f"[red]{e}[/red]")
                raise typer.Exit(1)

    attached = []
    for path in attach or []:
        try:
            attached.append(
                asyncio.run(read_attachment(path.read_bytes(), path.name, "user_info", service.llm))
            )
        except (OSError, ValueError) as e:
            console.print(f"[red]첨부 파일 처리 실패 ({path}): {e}[/red]")
            raise typer.Exit(1)

    inputs = PipelineInput(
        job_role=role,
        job_posting=posting_text,
        user_info=_read(info),
        questions=_read(questions),
        initial_draft=_read(draft),
        attached_files=tuple(attached),
        use_search_grounding=search,
        use_thinking_mode=thinking,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("자소서 생성 준비 중...", total=None)

        def on_phase(phase: str, detail: str) -> None:
            progress.update(task, description=detail)

        try:
            result = asyncio.run(service.generate(profile.uid, inputs, on_phase=on_phase))
        except CreditDeniedError as e:
            console.print(f"[yellow]{e}[/yellow]")
            raise typer.Exit(2)
        except JasaoseoError as e:
            console.print(f"[red]오류가 발생했습니다: {e}. 잠시 후 다시 시도해주세요.[/red]")
            raise typer.Exit(1)

    _print_result(result)
    console.print(f"[dim]소요: {result.elapsed_seconds:.1f}초 | {_format_balance(service.gate.remaining(profile.uid))}[/dim]")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.final_output, encoding="utf-8")
        console.print(f"[green]자소서 저장: {output}[/green]")

    if title:
        doc_id = service.documents.save(
            profile.uid, title, inputs, result.final_output, result.analysis_report
        )
        console.print(f"[green]문서 저장 완료 (id: {doc_id})[/green]")


@app.command()
def revise(
    document_id: str = typer.Argument(help="수정할 문서 id"),
    request: str = typer.Argument(help="수정 요청사항"),
    email: str = typer.Option(..., "--email", "-e", help="로그인 이메일"),
) -> None:
    """저장된 자소서를 요청사항에 맞게 최종 편집 단계만 다시 실행합니다."""
    service = _service()
    profile = _sign_in(service, email)
    doc = service.documents.get(profile.uid, document_id)
    if doc is None:
        console.print(f"[red]문서를 찾을 수 없습니다: {document_id}[/red]")
        raise typer.Exit(1)

    inputs = doc.to_input()
    result = PipelineResult(
        variant=service.orchestrator.variant.name,
        stages=[],
        final_output=doc.final_output,
        analysis_report=doc.analysis_report,
    )
    with console.status("수정 중..."):
        try:
            asyncio.run(service.revise(profile.uid, result, request, inputs))
        except JasaoseoError as e:
            console.print(f"[red]수정 중 오류가 발생했습니다: {e}[/red]")
            raise typer.Exit(1)

    service.documents.update(profile.uid, document_id, final_output=result.final_output)
    console.print(Panel(result.final_output, title="수정된 자기소개서", border_style="green"))


@app.command()
def proofread(
    file: Path = typer.Argument(help="검사할 텍스트 파일"),
    email: str = typer.Option(..., "--email", "-e", help="로그인 이메일"),
) -> None:
    """맞춤법과 문장을 검사합니다."""
    service = _service()
    profile = _sign_in(service, email)
    with console.status("맞춤법 검사 중..."):
        try:
            issues = asyncio.run(service.proofread(profile.uid, _read(file)))
        except Exception as e:
            console.print(f"[red]맞춤법 검사 API 호출에 실패했습니다: {e}[/red]")
            raise typer.Exit(1)

    if not issues:
        console.print("[green]발견된 오류가 없습니다.[/green]")
        return
    for issue in issues:
        console.print(f"- [red]{issue.original}[/red] → [green]{issue.corrected}[/green] [dim]({issue.reason})[/dim]")


@docs_app.command("list")
def docs_list(email: str = typer.Argument(help="로그인 이메일")) -> None:
    """저장된 문서 목록을 최근 수정순으로 표시합니다."""
    service = _service()
    profile = _sign_in(service, email)
    documents = service.documents.list_documents(profile.uid)
    if not documents:
        console.print("[yellow]저장된 문서가 없습니다.[/yellow]")
        return

    table = Table()
    table.add_column("id", style="dim")
    table.add_column("제목")
    table.add_column("직무")
    table.add_column("수정일")
    for doc in documents:
        table.add_row(doc.id, doc.title, doc.job_role, doc.updated_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@docs_app.command("show")
def docs_show(
    document_id: str = typer.Argument(help="문서 id"),
    email: str = typer.Option(..., "--email", "-e", help="로그인 이메일"),
) -> None:
    """저장된 문서를 표시합니다."""
    service = _service()
    profile = _sign_in(service, email)
    doc = service.documents.get(profile.uid, document_id)
    if doc is None:
        console.print(f"[red]문서를 찾을 수 없습니다: {document_id}[/red]")
        raise typer.Exit(1)
    console.print(Panel(doc.final_output, title=doc.title, border_style="green"))
    if doc.analysis_report:
        console.print(Panel(doc.analysis_report, title="분석 리포트", border_style="blue"))


@docs_app.command("delete")
def docs_delete(
    document_id: str = typer.Argument(help="문서 id"),
    email: str = typer.Option(..., "--email", "-e", help="로그인 이메일"),
    yes: bool = typer.Option(False, "--yes", "-y", help="확인 없이 삭제"),
) -> None:
    """문서를 삭제합니다. 삭제된 문서는 복구할 수 없습니다."""
    service = _service()
    profile = _sign_in(service, email)
    if not yes and not typer.confirm("정말 삭제하시겠습니까? 복구할 수 없습니다."):
        raise typer.Abort()
    service.documents.delete(profile.uid, document_id)
    console.print("[green]삭제되었습니다.[/green]")


@app.command("add-points")
def add_points(
    email: str = typer.Argument(help="충전 대상 이메일"),
    points: int = typer.Argument(help="충전할 포인트 수"),
) -> None:
    """(운영자 전용) 결제 완료 후 포인트를 충전합니다. JASAOSEO_OPERATOR_KEY 필요."""
    service = _service()
    profile = _operator_target(service, email)
    try:
        service.gate.add_points(profile.uid, points)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(_format_balance(service.gate.remaining(profile.uid)))


@app.command()
def subscribe(
    email: str = typer.Argument(help="구독 대상 이메일"),
    days: int = typer.Option(30, "--days", help="구독 기간 (일)"),
) -> None:
    """(운영자 전용) 결제 완료 후 Pro 구독을 시작하거나 연장합니다. JASAOSEO_OPERATOR_KEY 필요."""
    service = _service()
    profile = _operator_target(service, email)
    updated = service.gate.activate_subscription(profile.uid, days=days)
    console.print(f"[green]Pro 구독: {updated.subscription_end_date:%Y-%m-%d}까지[/green]")


@app.command()
def usage() -> None:
    """이번 달 사용량과 예상 비용을 표시합니다."""
    stats = _service().usage.get_monthly_stats()
    console.print(Panel(
        f"실행: {stats['total_runs']}회 (수정 {stats['revisions']}회)\n"
        f"토큰: 입력 {stats['total_input_tokens']:,} / 출력 {stats['total_output_tokens']:,}\n"
        f"예상 비용: ${stats['total_cost_usd']:.4f}\n"
        f"성공률: {stats['success_rate']:.1f}%",
        title=f"사용량 ({stats['month']})",
    ))


if __name__ == "__main__":
    app()
