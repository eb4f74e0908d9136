"""
npm_steps
---------

npm 기반 단계들: 의존성 설치, 테스트, 린트/타입체크, 프로덕션 빌드.

테스트/린트/타입체크는 진단용(advisory) 단계로, 실패해도 경고만 남기고 계속 진행한다.
빌드 단계의 실패만 치명적이다.
"""

from __future__ import annotations

import os
import shutil
from typing import List

from . import subprocess_utils
from .config import DeployConfig
from .logging_utils import get_logger, log_success


logger = get_logger(__name__)


# 빌드 경고로 실패하지 않도록 CI strict 모드를 끈다.
BUILD_ENV = {"CI": "false"}


def _require_dashboard(cfg: DeployConfig) -> str:
    path = cfg.dashboard_path
    if not os.path.isdir(path):
        raise RuntimeError(f"대시보드 디렉토리를 찾을 수 없습니다: {cfg.dashboard_dir}")
    return path


def install_dependencies(cfg: DeployConfig) -> List[str]:
    """
    backend(있으면) / dashboard 순서로 `npm ci` 를 실행한다.
    dashboard 디렉토리가 없으면 어떤 설치도 시작하기 전에 실패한다.

    Returns:
        설치를 수행한 서브 프로젝트 디렉토리 이름 목록
    """
    logger.info("의존성을 설치합니다...")
    dashboard = _require_dashboard(cfg)

    installed: List[str] = []

    if os.path.isdir(cfg.backend_path):
        logger.info("backend 의존성을 설치합니다...")
        subprocess_utils.run_command([cfg.npm_bin, "ci"], cwd=cfg.backend_path, stream_output=True)
        log_success(logger, "backend 의존성 설치 완료")
        installed.append(cfg.backend_dir)
    else:
        logger.debug("backend 디렉토리가 없어 건너뜀: %s", cfg.backend_path)

    logger.info("dashboard 의존성을 설치합니다...")
    subprocess_utils.run_command([cfg.npm_bin, "ci"], cwd=dashboard, stream_output=True)
    log_success(logger, "dashboard 의존성 설치 완료")
    installed.append(cfg.dashboard_dir)

    return installed


def _advisory(cfg: DeployConfig, args: List[str], *, ok_msg: str, warn_msg: str) -> bool:
    """
    실패해도 파이프라인을 멈추지 않는 npm 스크립트 실행.
    명령 자체가 실행되지 않는 경우(npm 없음 등)도 경고로 처리한다.
    """
    try:
        result = subprocess_utils.run_command(
            [cfg.npm_bin, *args],
            cwd=cfg.dashboard_path,
            check=False,
            stream_output=True,
        )
    except RuntimeError as e:
        logger.debug("advisory 단계 실행 불가: %s", e)
        logger.warning(warn_msg)
        return False

    if result.ok:
        log_success(logger, ok_msg)
        return True

    logger.warning(warn_msg)
    return False


def run_tests(cfg: DeployConfig) -> bool:
    logger.info("테스트를 실행합니다...")
    if not os.path.isdir(cfg.dashboard_path):
        logger.warning("대시보드 디렉토리가 없어 테스트를 건너뜁니다: %s", cfg.dashboard_dir)
        return False
    logger.info("dashboard 테스트를 실행합니다...")
    return _advisory(
        cfg,
        ["run", "test", "--", "--watchAll=false"],
        ok_msg="dashboard 테스트 통과",
        warn_msg="dashboard 테스트가 설정되지 않았거나 실패했습니다",
    )


def build_dashboard(cfg: DeployConfig, *, clean: bool = False) -> str:
    """
    린트/타입체크(advisory) 후 프로덕션 빌드를 실행한다.

    Returns:
        빌드 결과 디렉토리 경로
    """
    logger.info("프로덕션용 대시보드를 빌드합니다...")
    dashboard = _require_dashboard(cfg)

    if clean and os.path.isdir(cfg.build_path):
        logger.warning("이전 빌드 결과를 삭제합니다: %s", cfg.build_path)
        shutil.rmtree(cfg.build_path)

    _advisory(
        cfg,
        ["run", "lint"],
        ok_msg="린트 통과",
        warn_msg="린트가 실패했거나 설정되지 않았습니다",
    )
    _advisory(
        cfg,
        ["run", "type-check"],
        ok_msg="타입 체크 통과",
        warn_msg="타입 체크가 실패했거나 설정되지 않았습니다",
    )

    logger.info("React 애플리케이션을 빌드합니다...")
    subprocess_utils.run_command(
        [cfg.npm_bin, "run", "build"],
        cwd=dashboard,
        env=BUILD_ENV,
        stream_output=True,
    )

    log_success(logger, "대시보드 빌드 완료")
    return cfg.build_path
