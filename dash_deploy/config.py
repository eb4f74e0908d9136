from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional, List

from dotenv import load_dotenv


ENV_FILES_DEFAULT_ORDER = [".env.deploy"]

_VERSION_RE = re.compile(r"^v?\d+(\.\d+)*$")


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 배포 설정용 .env 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _get_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


@dataclass
class DeployConfig:
    base_dir: str = "."
    project_name: str = "Pranayama Coach"

    # 서브 프로젝트
    dashboard_dir: str = "web-dashboard"
    backend_dir: str = "backend"
    build_dir: str = "build"

    # 수동 배포 아카이브
    archive_prefix: str = "pranayama-dashboard"

    # 툴체인
    min_node_version: str = "18.0.0"
    node_bin: str = "node"
    npm_bin: str = "npm"

    # 호스팅
    hosting_cli: str = "netlify"
    hosting_cli_package: str = "netlify-cli"
    netlify_site_id: Optional[str] = None

    @property
    def dashboard_path(self) -> str:
        return os.path.join(self.base_dir, self.dashboard_dir)

    @property
    def backend_path(self) -> str:
        return os.path.join(self.base_dir, self.backend_dir)

    @property
    def build_path(self) -> str:
        return os.path.join(self.dashboard_path, self.build_dir)

    @classmethod
    def from_env(cls, base_dir: str = ".") -> "DeployConfig":
        cfg = cls(
            base_dir=base_dir,
            project_name=_get_str("PROJECT_NAME", cls.project_name),
            dashboard_dir=_get_str("DASHBOARD_DIR", cls.dashboard_dir),
            backend_dir=_get_str("BACKEND_DIR", cls.backend_dir),
            build_dir=_get_str("BUILD_DIR", cls.build_dir),
            archive_prefix=_get_str("ARCHIVE_PREFIX", cls.archive_prefix),
            min_node_version=_get_str("MIN_NODE_VERSION", cls.min_node_version),
            node_bin=_get_str("NODE_BIN", cls.node_bin),
            npm_bin=_get_str("NPM_BIN", cls.npm_bin),
            hosting_cli=_get_str("HOSTING_CLI", cls.hosting_cli),
            hosting_cli_package=_get_str("HOSTING_CLI_PACKAGE", cls.hosting_cli_package),
            netlify_site_id=os.getenv("NETLIFY_SITE_ID") or None,
        )
        cfg.validate()
        return cfg

    def validate(self) -> None:
        """
        경로/버전 설정값의 형식을 검증한다. 잘못된 값이 있으면 ValueError.
        """
        problems: List[str] = []

        if not _VERSION_RE.match(self.min_node_version):
            problems.append(f"MIN_NODE_VERSION 형식이 잘못되었습니다: {self.min_node_version!r}")

        # 서브 프로젝트/빌드 디렉토리는 프로젝트 루트 기준 상대 경로만 허용
        for env_name, value in (
            ("DASHBOARD_DIR", self.dashboard_dir),
            ("BACKEND_DIR", self.backend_dir),
            ("BUILD_DIR", self.build_dir),
        ):
            if os.path.isabs(value) or ".." in value.replace("\\", "/").split("/"):
                problems.append(f"{env_name} 는 상대 경로여야 합니다: {value!r}")

        if "/" in self.archive_prefix or "\\" in self.archive_prefix:
            problems.append(f"ARCHIVE_PREFIX 에 경로 구분자를 쓸 수 없습니다: {self.archive_prefix!r}")

        if problems:
            raise ValueError("설정 값이 올바르지 않습니다: " + "; ".join(problems))
