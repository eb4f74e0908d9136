from __future__ import annotations

import os
from typing import Callable, List, Optional

import click

from . import build_output, env_files, netlify_hosting, npm_steps, prerequisites, subprocess_utils
from .config import DeployConfig
from .logging_utils import get_logger


logger = get_logger(__name__)

DEPLOY_METHODS = {
    "1": "Netlify 로 배포 (Netlify CLI 필요)",
    "2": "수동 배포 패키지 생성",
}

Choose = Callable[[], str]


def _default_choose() -> str:
    click.echo("배포 방법을 선택하세요:")
    for key, label in DEPLOY_METHODS.items():
        click.echo(f"{key}) {label}")
    return click.prompt("선택 (1 또는 2)", type=str)


def run_full(
    cfg: DeployConfig,
    *,
    choose: Optional[Choose] = None,
    confirm: Optional[netlify_hosting.Confirm] = None,
) -> str:
    """
    setup → install → test → build 를 순서대로 실행한 뒤,
    배포 방법(Netlify / 수동 패키지)을 선택받아 실행한다.

    사전 요구사항 점검은 호출 측(CLI)에서 한 번만 수행한다.
    잘못된 선택은 업로드/아카이브 없이 RuntimeError.

    Returns:
        선택된 방법 ("1" 또는 "2")
    """
    choose = choose or _default_choose

    env_files.setup_environment(cfg)
    npm_steps.install_dependencies(cfg)
    npm_steps.run_tests(cfg)
    npm_steps.build_dashboard(cfg)

    logger.info("배포 방법을 선택하세요")
    choice = (choose() or "").strip()

    if choice == "1":
        netlify_hosting.deploy_site(cfg, confirm)
    elif choice == "2":
        build_output.create_archive(cfg)
    else:
        raise RuntimeError(f"잘못된 선택입니다: {choice!r}")

    return choice


def check_all(cfg: DeployConfig, show_all: bool = False) -> tuple[str, bool]:
    """
    아무것도 설치/빌드/배포하지 않고 현재 작업 디렉토리 상태를 점검한다.

    Returns:
        summary: 사람이 읽기 좋은 텍스트 요약
        has_issues: 치명적인 이슈(툴체인 없음, 대시보드 없음 등)가 있는지 여부
    """
    lines: List[str] = []
    critical: List[str] = []
    warnings: List[str] = []

    lines.append("# Deploy pre-check")
    lines.append(f"- project: {cfg.project_name}")
    lines.append(f"- base_dir: {os.path.abspath(cfg.base_dir)}")
    lines.append("")

    # 1) 툴체인
    lines.append("## Toolchain")
    if not subprocess_utils.command_exists(cfg.node_bin):
        critical.append(f"{cfg.node_bin}: 설치되어 있지 않습니다")
    else:
        try:
            version = prerequisites.node_version(cfg)
            status = f"{cfg.node_bin}: {version} (최소 {cfg.min_node_version})"
            if show_all:
                lines.append(f"- {status}")
            if not prerequisites.version_at_least(version, cfg.min_node_version):
                critical.append(f"{cfg.node_bin}: {version} 은(는) 최소 버전 {cfg.min_node_version} 미만입니다")
        except Exception as e:  # noqa: BLE001
            critical.append(f"{cfg.node_bin}: 버전 확인 실패: {e}")

    if subprocess_utils.command_exists(cfg.npm_bin):
        if show_all:
            lines.append(f"- {cfg.npm_bin}: 설치됨")
    else:
        critical.append(f"{cfg.npm_bin}: 설치되어 있지 않습니다")

    if subprocess_utils.command_exists(cfg.hosting_cli):
        if show_all:
            lines.append(f"- {cfg.hosting_cli}: 설치됨")
    else:
        # deploy 시 자동으로 설치되므로 경고
        warnings.append(f"{cfg.hosting_cli}: 설치되어 있지 않습니다 (deploy 시 설치 예정)")
    lines.append("")

    # 2) 서브 프로젝트
    lines.append("## Sub-projects")
    if os.path.isdir(cfg.dashboard_path):
        if show_all:
            lines.append(f"- {cfg.dashboard_dir}: 있음")
    else:
        critical.append(f"{cfg.dashboard_dir}: 디렉토리 없음")

    if os.path.isdir(cfg.backend_path):
        if show_all:
            lines.append(f"- {cfg.backend_dir}: 있음")
    elif show_all:
        lines.append(f"- {cfg.backend_dir}: 없음 (설치 건너뜀)")
    lines.append("")

    # 3) 환경 파일
    lines.append("## Environment files")
    for name in env_files.DASHBOARD_ENV_FILES:
        path = os.path.join(cfg.dashboard_path, name)
        if os.path.isfile(path):
            if show_all:
                lines.append(f"- {name}: 있음")
        else:
            # setup 이 생성할 수 있는 파일 → 경고
            warnings.append(f"{name}: 없음 (setup 시 생성 예정)")
    lines.append("")

    # 4) 빌드 결과
    lines.append("## Build output")
    if os.path.isdir(cfg.build_path):
        index_ok = os.path.isfile(os.path.join(cfg.build_path, "index.html"))
        if show_all:
            lines.append(f"- {cfg.build_dir}: 있음 (index.html: {'있음' if index_ok else '없음'})")
        if not index_ok:
            warnings.append(f"{cfg.build_dir}/index.html: 없음")
    else:
        warnings.append(f"{cfg.build_dir}: 빌드 결과 없음 (build 필요)")
    lines.append("")

    if show_all:
        lines.append("## Raw env from files")
        lines.append(env_files.dump_env_files(cfg))
        lines.append("")

    # Summary
    lines.append("## Summary")
    if critical:
        lines.append("- 상태: 크리티컬 이슈가 있습니다. 배포 전 반드시 해결해야 합니다.")
    elif warnings:
        lines.append("- 상태: 경고만 있습니다.")
    else:
        lines.append("- 상태: 주요 이슈 없음 (배포 가능 상태로 보입니다)")

    if show_all or critical:
        lines.append("")
        lines.append("### Critical issues")
        if critical:
            for i in critical:
                lines.append(f"- {i}")
        else:
            lines.append("- (none)")

    if show_all or warnings:
        lines.append("")
        lines.append("### Warnings")
        if warnings:
            for i in warnings:
                lines.append(f"- {i}")
        else:
            lines.append("- (none)")

    if not show_all:
        lines.append("")
        lines.append("자세한 상태를 보려면 `dash-deploy check -a` 를 실행하세요.")

    summary = "\n".join(lines)
    return summary, bool(critical)
