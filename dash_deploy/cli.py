import sys
from typing import Any, Callable, NoReturn, TypeVar

import click

from . import __version__
from . import build_output, env_files, netlify_hosting, npm_steps
from .config import load_env_files, DeployConfig
from .logging_utils import setup_logging, get_logger, log_success
from .orchestrator import check_all, run_full
from .prerequisites import check_prerequisites


logger = get_logger(__name__)

T = TypeVar("T")

BANNER_WIDTH = 37


class _DeployGroup(click.Group):
    """알 수 없는 커맨드는 exit 2 대신 사용법을 출력하고 exit 1 로 끝낸다."""

    def resolve_command(self, ctx: click.Context, args: list[str]):  # noqa: ANN201
        name = args[0] if args else None
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            click.echo(click.style(f"[ERROR] 알 수 없는 명령: {name}", fg="red"), err=True)
            click.echo(ctx.get_help())
            ctx.exit(1)
        return super().resolve_command(ctx, args)


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"[ERROR] {message}", fg="red"), err=True)
    sys.exit(1)


def _run_step(label: str, fn: Callable[[], T]) -> T:
    """
    단계 실행 래퍼. 치명적 오류는 [ERROR] 로 출력하고 exit 1.
    """
    try:
        return fn()
    except (click.exceptions.Exit, click.Abort, click.ClickException):
        raise
    except Exception as e:  # noqa: BLE001
        logger.debug("%s 실패", label, exc_info=True)
        _fail(str(e))


def _load_config_from_ctx(ctx: click.Context) -> DeployConfig:
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    cfg = DeployConfig.from_env(base_dir)
    logger.debug("Config loaded: %s", cfg)
    return cfg


def _prepare(ctx: click.Context, *, require_prerequisites: bool = True) -> DeployConfig:
    try:
        cfg = _load_config_from_ctx(ctx)
    except Exception as e:  # noqa: BLE001
        _fail(f"설정 로드 실패: {e}")

    if require_prerequisites:
        _run_step("사전 요구사항 확인", lambda: check_prerequisites(cfg))
    return cfg


@click.group(
    cls=_DeployGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="프로젝트 루트 디렉토리 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다.",
)
@click.version_option(__version__, prog_name="dash-deploy")
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """웹 대시보드 빌드 및 Netlify / 수동 패키지 배포용 CLI"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose

    click.echo("=" * BANNER_WIDTH)
    click.echo("Dashboard Deployment")
    click.echo("=" * BANNER_WIDTH)
    click.echo("")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.result_callback()
@click.pass_context
def _finished(ctx: click.Context, result: Any, **kwargs: Any) -> None:  # noqa: ARG001
    click.echo("")
    log_success(logger, "완료되었습니다!")


@main.command(name="help")
@click.pass_context
def help_(ctx: click.Context) -> None:
    """사용법 출력"""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


@main.command()
@click.pass_context
def setup(ctx: click.Context) -> None:
    """대시보드 환경 파일(.env.local / .env.production) 생성 (이미 있으면 유지)"""
    cfg = _prepare(ctx)
    _run_step("환경 설정", lambda: env_files.setup_environment(cfg))


@main.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """backend / dashboard 의존성 설치 (npm ci)"""
    cfg = _prepare(ctx)
    _run_step("의존성 설치", lambda: npm_steps.install_dependencies(cfg))


@main.command(name="test")
@click.pass_context
def test_(ctx: click.Context) -> None:
    """dashboard 테스트 실행 (실패해도 경고만 출력)"""
    cfg = _prepare(ctx)
    _run_step("테스트", lambda: npm_steps.run_tests(cfg))


@main.command()
@click.option("--clean", is_flag=True, help="빌드 전에 이전 빌드 결과를 삭제합니다.")
@click.pass_context
def build(ctx: click.Context, clean: bool) -> None:
    """린트/타입체크(실패 허용) 후 프로덕션 빌드"""
    cfg = _prepare(ctx)
    _run_step("빌드", lambda: npm_steps.build_dashboard(cfg, clean=clean))


@main.command()
@click.pass_context
def deploy(ctx: click.Context) -> None:
    """Netlify 로 프로덕션 배포 (CLI 설치/로그인 확인 포함)"""
    cfg = _prepare(ctx)
    _run_step("배포", lambda: netlify_hosting.deploy_site(cfg))


@main.command()
@click.pass_context
def manual(ctx: click.Context) -> None:
    """빌드 결과를 수동 업로드용 tar.gz 로 묶기"""
    cfg = _prepare(ctx)
    _run_step("수동 배포 패키지", lambda: build_output.create_archive(cfg))


@main.command()
@click.pass_context
def full(ctx: click.Context) -> None:
    """setup → install → test → build 후 배포 방법 선택"""
    cfg = _prepare(ctx)
    _run_step("전체 파이프라인", lambda: run_full(cfg))


@main.command()
@click.pass_context
def verify(ctx: click.Context) -> None:
    """빌드 결과 점검 (index.html / JS 번들 / _redirects)"""
    cfg = _prepare(ctx)
    _run_step("빌드 결과 점검", lambda: build_output.verify_build_output(cfg))


@main.command()
@click.option(
    "-a",
    "--all",
    "show_all",
    is_flag=True,
    help="모든 체크 항목의 상세 상태와 환경 파일 내용을 출력합니다. (기본은 이슈만 요약)",
)
@click.pass_context
def check(ctx: click.Context, show_all: bool) -> None:
    """
    배포 전에 툴체인/디렉토리/환경 파일/빌드 결과 상태를 점검한다.
    (아무것도 설치/빌드/배포하지 않는다)
    """
    cfg = _prepare(ctx, require_prerequisites=False)

    report, has_issues = _run_step("사전 점검", lambda: check_all(cfg, show_all=show_all))
    click.echo(report)

    # 치명적인 이슈가 있으면 exit 1 로 종료하여 CI 등에서 감지 가능하게 한다.
    if has_issues:
        sys.exit(1)
