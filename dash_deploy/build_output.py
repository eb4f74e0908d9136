"""
build_output
------------

빌드 결과 디렉토리를 다루는 모듈.

- 수동 업로드용 타임스탬프 tar.gz 아카이브 생성
- 배포 전 빌드 결과 점검 (index.html / JS 번들 / SPA _redirects)
"""

from __future__ import annotations

import glob
import os
import shutil
import tarfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .config import DeployConfig
from .logging_utils import get_logger, log_success


logger = get_logger(__name__)


ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
REDIRECTS_FILE = "_redirects"


def archive_name(cfg: DeployConfig, now: datetime) -> str:
    return f"{cfg.archive_prefix}-{now.strftime(ARCHIVE_TIMESTAMP_FORMAT)}.tar.gz"


def _require_build_dir(cfg: DeployConfig) -> str:
    path = cfg.build_path
    if not os.path.isdir(path):
        raise RuntimeError("빌드 디렉토리를 찾을 수 없습니다. 먼저 build 를 실행하세요.")
    return path


def create_archive(cfg: DeployConfig, now: Optional[datetime] = None) -> str:
    """
    빌드 결과를 대시보드 상위 디렉토리에 `<prefix>-YYYYmmdd-HHMMSS.tar.gz` 로 묶는다.
    아카이브 안에서는 빌드 디렉토리 이름(`build/...`) 아래에 파일이 위치한다.

    Returns:
        생성된 아카이브 경로
    """
    logger.info("수동 배포를 준비합니다...")
    build_path = _require_build_dir(cfg)

    now = now or datetime.now()
    name = archive_name(cfg, now)
    target = os.path.join(os.path.dirname(os.path.abspath(cfg.dashboard_path)), name)

    # 같은 초에 만든 아카이브가 이미 있으면 덮어쓰지 않고 FileExistsError
    try:
        with tarfile.open(target, "x:gz") as tar:
            tar.add(build_path, arcname=cfg.build_dir)
    except FileExistsError:
        raise RuntimeError(f"같은 이름의 배포 패키지가 이미 있습니다: {name}") from None
    except BaseException:
        # 중간에 실패한 잘린 아카이브는 남기지 않는다.
        if os.path.exists(target):
            os.unlink(target)
        raise

    log_success(logger, "배포 패키지 생성: %s", name)
    logger.info("이 파일을 호스팅 서비스에 업로드하면 됩니다.")
    return target


@dataclass
class BuildCheck:
    index_html: bool = False
    js_bundles: List[str] = field(default_factory=list)
    redirects: str = "missing"  # present | copied | missing


def verify_build_output(cfg: DeployConfig) -> BuildCheck:
    """
    배포 전에 빌드 결과를 점검한다.

    - index.html 이 없으면 RuntimeError
    - static/js/*.js 가 없으면 경고
    - _redirects 가 없으면 public/_redirects 를 복사 (없으면 경고)
    """
    logger.info("빌드 결과를 확인합니다...")
    build_path = _require_build_dir(cfg)
    check = BuildCheck()

    if os.path.isfile(os.path.join(build_path, "index.html")):
        check.index_html = True
        log_success(logger, "index.html 확인")
    else:
        raise RuntimeError(f"index.html 이 없습니다: {build_path}")

    check.js_bundles = sorted(glob.glob(os.path.join(build_path, "static", "js", "*.js")))
    if check.js_bundles:
        log_success(logger, "JavaScript 번들 %d 개 확인", len(check.js_bundles))
    else:
        logger.warning("JavaScript 번들(static/js/*.js)이 없습니다")

    redirects = os.path.join(build_path, REDIRECTS_FILE)
    if os.path.isfile(redirects):
        check.redirects = "present"
        log_success(logger, "%s 확인", REDIRECTS_FILE)
    else:
        source = os.path.join(cfg.dashboard_path, "public", REDIRECTS_FILE)
        if os.path.isfile(source):
            logger.warning("%s 이(가) 없어 public/ 에서 복사합니다", REDIRECTS_FILE)
            shutil.copyfile(source, redirects)
            check.redirects = "copied"
        else:
            logger.warning("%s 이(가) 없습니다. SPA 라우팅이 404 를 낼 수 있습니다", REDIRECTS_FILE)

    log_success(logger, "배포 준비 완료: %s", os.path.abspath(build_path))
    return check
