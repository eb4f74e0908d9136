"""
netlify_hosting
---------------

Netlify 배포를 담당하는 모듈.
CLI 설치 확인 → 로그인 상태 확인 → 프로덕션 배포 순서로 진행한다.
"""

from __future__ import annotations

import os
from typing import Callable, List

import click

from . import subprocess_utils
from .config import DeployConfig
from .logging_utils import get_logger, log_success


logger = get_logger(__name__)


Confirm = Callable[[str], bool]


def _default_confirm(question: str) -> bool:
    return click.confirm(question, default=False)


def ensure_cli(cfg: DeployConfig) -> bool:
    """
    hosting CLI 가 PATH 에 없으면 npm 으로 전역 설치한다.

    Returns:
        이번 호출에서 설치를 수행했는지 여부
    """
    if subprocess_utils.command_exists(cfg.hosting_cli):
        logger.debug("%s CLI 확인됨", cfg.hosting_cli)
        return False

    logger.error("Netlify CLI 가 설치되어 있지 않습니다. 설치를 진행합니다...")
    subprocess_utils.run_command(
        [cfg.npm_bin, "install", "-g", cfg.hosting_cli_package],
        stream_output=True,
    )
    return True


def ensure_login(cfg: DeployConfig, confirm: Confirm | None = None) -> None:
    """
    `netlify status` 로 인증 세션을 확인하고, 없으면 로그인 여부를 묻는다.
    사용자가 거절하면 RuntimeError.
    """
    confirm = confirm or _default_confirm

    status = subprocess_utils.run_command(
        [cfg.hosting_cli, "status"],
        cwd=cfg.dashboard_path,
        check=False,
    )
    if status.ok:
        logger.debug("Netlify 로그인 상태 확인됨")
        return

    logger.warning("Netlify 에 로그인되어 있지 않습니다. 먼저 'netlify login' 을 실행하세요.")
    if not confirm("지금 로그인하시겠습니까?"):
        raise RuntimeError("Netlify 인증 없이 배포할 수 없습니다.")

    subprocess_utils.run_command(
        [cfg.hosting_cli, "login"],
        cwd=cfg.dashboard_path,
        interactive=True,
    )


def deploy_command(cfg: DeployConfig) -> List[str]:
    cmd = [cfg.hosting_cli, "deploy", "--prod", f"--dir={cfg.build_dir}"]
    if cfg.netlify_site_id:
        cmd += ["--site", cfg.netlify_site_id]
    return cmd


def deploy_site(cfg: DeployConfig, confirm: Confirm | None = None) -> None:
    """
    빌드 결과 디렉토리를 Netlify 프로덕션으로 배포한다.
    빌드 결과가 없으면 CLI 설치/로그인 전에 실패한다.
    """
    logger.info("Netlify 에 배포합니다...")

    if not os.path.isdir(cfg.build_path):
        raise RuntimeError(
            f"빌드 디렉토리를 찾을 수 없습니다: {cfg.build_path} (먼저 build 를 실행하세요)"
        )

    ensure_cli(cfg)
    ensure_login(cfg, confirm)

    logger.info(
        "프로덕션 배포: dir=%s site=%s",
        cfg.build_dir,
        cfg.netlify_site_id or "(netlify link 설정 사용)",
    )
    try:
        subprocess_utils.run_command(
            deploy_command(cfg),
            cwd=cfg.dashboard_path,
            stream_output=True,
        )
    except RuntimeError as e:
        raise RuntimeError(f"Netlify 배포에 실패했습니다. {e}") from e

    log_success(logger, "배포 완료!")
