"""
env_files
---------

대시보드 서브 프로젝트의 .env.local / .env.production 파일을 준비한다.
파일이 없을 때만 만들고, 이미 있는 파일은 절대 덮어쓰지 않는다.
"""

from __future__ import annotations

import os
import shutil
from typing import List

from dotenv import dotenv_values

from .config import DeployConfig
from .logging_utils import get_logger, log_success


logger = get_logger(__name__)


LOCAL_ENV_FILE = ".env.local"
PRODUCTION_ENV_FILE = ".env.production"
EXAMPLE_ENV_FILE = ".env.example"

DASHBOARD_ENV_FILES = [LOCAL_ENV_FILE, PRODUCTION_ENV_FILE]

LOCAL_ENV_DEFAULT = """\
# Local development environment
REACT_APP_API_URL=http://localhost:3000/api
REACT_APP_ENVIRONMENT=development
REACT_APP_DEBUG=true
"""

PRODUCTION_ENV_DEFAULT = """\
# Production environment
REACT_APP_API_URL=/api
REACT_APP_ENVIRONMENT=production
REACT_APP_DEBUG=false
"""


def _write_new(path: str, content: str) -> None:
    # 'x' 모드: 그 사이에 파일이 생겼다면 덮어쓰지 않고 FileExistsError
    with open(path, "x", encoding="utf-8") as f:
        f.write(content)


def setup_environment(cfg: DeployConfig) -> List[str]:
    """
    환경 파일을 생성한다.

    Returns:
        이번 호출에서 새로 만든 파일 경로 목록 (이미 있으면 빈 리스트)
    """
    logger.info("환경 파일을 설정합니다...")

    dashboard = cfg.dashboard_path
    if not os.path.isdir(dashboard):
        raise RuntimeError(f"대시보드 디렉토리를 찾을 수 없습니다: {cfg.dashboard_dir}")

    created: List[str] = []

    local_path = os.path.join(dashboard, LOCAL_ENV_FILE)
    if not os.path.exists(local_path):
        example_path = os.path.join(dashboard, EXAMPLE_ENV_FILE)
        if os.path.isfile(example_path):
            shutil.copyfile(example_path, local_path)
            logger.warning("%s 에서 %s 을(를) 생성했습니다.", EXAMPLE_ENV_FILE, LOCAL_ENV_FILE)
            logger.warning("%s 의 값을 실제 환경에 맞게 수정하세요.", LOCAL_ENV_FILE)
        else:
            logger.warning("%s 이(가) 없어 기본 %s 을(를) 생성합니다.", EXAMPLE_ENV_FILE, LOCAL_ENV_FILE)
            _write_new(local_path, LOCAL_ENV_DEFAULT)
        created.append(local_path)
    else:
        logger.debug("%s 이(가) 이미 존재하여 건너뜀", local_path)

    production_path = os.path.join(dashboard, PRODUCTION_ENV_FILE)
    if not os.path.exists(production_path):
        logger.warning("%s 이(가) 없어 기본값으로 생성합니다.", PRODUCTION_ENV_FILE)
        _write_new(production_path, PRODUCTION_ENV_DEFAULT)
        created.append(production_path)
    else:
        logger.debug("%s 이(가) 이미 존재하여 건너뜀", production_path)

    log_success(logger, "환경 설정 완료")
    return created


def dump_env_files(cfg: DeployConfig) -> str:
    """
    대시보드 환경 파일의 내용을 그대로 덤프한다.
    (주석/빈 줄은 제외)
    """
    lines: list[str] = []
    for filename in DASHBOARD_ENV_FILES:
        lines.append(f"## {filename}")
        path_values = dotenv_values(dotenv_path=os.path.join(cfg.dashboard_path, filename))
        if not path_values:
            lines.append("- (파일이 없거나 비어 있습니다)")
        else:
            for k, v in sorted(path_values.items()):
                # None 은 dotenv 에서 값이 없는 키를 의미하므로 스킵
                if v is None:
                    continue
                lines.append(f"- {k}={v}")
        lines.append("")
    return "\n".join(lines).rstrip()
