"""
prerequisites
-------------

모든 서브 커맨드(help 제외) 앞에서 실행되는 툴체인 점검.
node / npm 이 PATH 에 있고, node 버전이 최소 버전 이상인지 확인한다.
"""

from __future__ import annotations

import re
from typing import Tuple

from . import subprocess_utils
from .config import DeployConfig
from .logging_utils import get_logger, log_success


logger = get_logger(__name__)


def version_key(version: str) -> Tuple[int, ...]:
    """
    'v18.17.1' / '18.0.0' 형태의 버전을 숫자 튜플로 변환한다.
    각 구성 요소는 앞쪽 숫자만 사용한다. ('20.0.0-rc1' -> (20, 0, 0))
    """
    raw = version.strip()
    if raw[:1] in {"v", "V"}:
        raw = raw[1:]

    parts: list[int] = []
    for piece in raw.split("."):
        m = re.match(r"\d+", piece)
        if m is None:
            break
        parts.append(int(m.group(0)))

    if not parts:
        raise ValueError(f"버전 문자열을 해석할 수 없습니다: {version!r}")

    # 길이가 다른 버전끼리의 비교를 위해 끝의 0 은 제거 (18 == 18.0.0)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def version_at_least(version: str, minimum: str) -> bool:
    return version_key(version) >= version_key(minimum)


def _major(version: str) -> str:
    return str(version_key(version)[0])


def node_version(cfg: DeployConfig) -> str:
    """`node --version` 출력에서 앞의 'v' 를 뗀 버전 문자열."""
    result = subprocess_utils.run_command([cfg.node_bin, "--version"])
    out = result.stdout.strip()
    return out[1:] if out[:1] in {"v", "V"} else out


def check_prerequisites(cfg: DeployConfig) -> str:
    """
    실행 환경을 점검한다. 하나라도 만족하지 않으면 RuntimeError.

    Returns:
        감지된 node 버전
    """
    logger.info("사전 요구사항을 확인합니다...")

    if not subprocess_utils.command_exists(cfg.node_bin):
        raise RuntimeError(
            f"Node.js 가 설치되어 있지 않습니다. Node.js {_major(cfg.min_node_version)} 이상을 설치하세요."
        )

    if not subprocess_utils.command_exists(cfg.npm_bin):
        raise RuntimeError("npm 이 설치되어 있지 않습니다. npm 을 설치하세요.")

    version = node_version(cfg)
    try:
        ok = version_at_least(version, cfg.min_node_version)
    except ValueError as e:
        raise RuntimeError(f"Node.js 버전을 확인할 수 없습니다: {version!r}") from e

    if not ok:
        raise RuntimeError(
            f"Node.js {version} 은(는) 너무 오래된 버전입니다. "
            f"{_major(cfg.min_node_version)} 이상을 설치하세요."
        )

    logger.debug("node=%s (최소 %s)", version, cfg.min_node_version)
    log_success(logger, "사전 요구사항 확인 완료")
    return version
