"""
pytest 설정:

로컬 작업 환경에 설치된 다른 버전의 dash_deploy 패키지가 존재할 때,
`pytest` 실행 시 site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.

테스트는 항상 현재 레포의 소스를 대상으로 해야 하므로, repo root 를 sys.path 최상단에 고정한다.

외부 명령(node/npm/netlify)은 실제로 실행하지 않고 FakeRunner 로 기록만 한다.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


@dataclass
class Call:
    cmd: List[str]
    cwd: Optional[str]
    env: Dict[str, str] = field(default_factory=dict)
    check: bool = True
    interactive: bool = False


class FakeRunner:
    """
    subprocess_utils.run_command / command_exists 대체.

    - 명령 prefix 별 exit code / stdout 을 지정할 수 있다 (가장 긴 prefix 우선)
    - 명령 prefix 별 부수효과(예: build 디렉토리 생성)를 지정할 수 있다
    """

    def __init__(self) -> None:
        self.calls: List[Call] = []
        self._responses: Dict[Tuple[str, ...], Tuple[int, str]] = {
            ("node", "--version"): (0, "v18.17.0\n"),
        }
        self._effects: Dict[Tuple[str, ...], Callable[[Call], None]] = {}
        self.missing: set[str] = set()

    def respond(self, *prefix: str, returncode: int = 0, stdout: str = "") -> None:
        self._responses[tuple(prefix)] = (returncode, stdout)

    def on(self, *prefix: str, effect: Callable[[Call], None]) -> None:
        self._effects[tuple(prefix)] = effect

    @staticmethod
    def _lookup(table: dict, cmd: List[str]):  # noqa: ANN205
        best = None
        for prefix, value in table.items():
            if tuple(cmd[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best[0])):
                best = (prefix, value)
        return None if best is None else best[1]

    def __call__(
        self,
        cmd: Sequence[str],
        *,
        cwd: Optional[str] = None,
        env=None,  # noqa: ANN001
        check: bool = True,
        stream_output: bool = False,  # noqa: ARG002
        interactive: bool = False,
    ):
        from dash_deploy.subprocess_utils import RunResult

        call = Call(
            cmd=list(cmd),
            cwd=cwd,
            env=dict(env or {}),
            check=check,
            interactive=interactive,
        )
        self.calls.append(call)

        effect = self._lookup(self._effects, call.cmd)
        if effect is not None:
            effect(call)

        returncode, stdout = self._lookup(self._responses, call.cmd) or (0, "")
        if check and returncode != 0:
            raise RuntimeError(f"명령 실행 실패: {' '.join(call.cmd)} (exit={returncode})")
        return RunResult(returncode=returncode, stdout=stdout, stderr="")

    def command_exists(self, name: str) -> bool:
        return name not in self.missing

    @property
    def commands(self) -> List[List[str]]:
        return [c.cmd for c in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.commands)


@pytest.fixture
def fake_runner(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    from dash_deploy import subprocess_utils

    runner = FakeRunner()
    monkeypatch.setattr(subprocess_utils, "run_command", runner)
    monkeypatch.setattr(subprocess_utils, "command_exists", runner.command_exists)
    return runner


@pytest.fixture
def project(tmp_path):  # noqa: ANN001, ANN201
    """backend + web-dashboard 를 가진 빈 프로젝트 루트."""
    (tmp_path / "web-dashboard").mkdir()
    (tmp_path / "backend").mkdir()
    return tmp_path


@pytest.fixture
def cfg(project):  # noqa: ANN001, ANN201
    from dash_deploy.config import DeployConfig

    return DeployConfig(base_dir=str(project))


def make_build(dashboard) -> None:  # noqa: ANN001
    """react-scripts build 결과와 비슷한 디렉토리 구조를 만든다."""
    build = dashboard / "build"
    (build / "static" / "js").mkdir(parents=True, exist_ok=True)
    (build / "index.html").write_text("<html></html>", encoding="utf-8")
    (build / "static" / "js" / "main.abc123.js").write_text("console.log(1)", encoding="utf-8")


@pytest.fixture
def builds_on_npm_build(fake_runner: FakeRunner, project):  # noqa: ANN001, ANN201
    """`npm run build` 가 실행되면 build 디렉토리가 생기도록 한다."""
    fake_runner.on("npm", "run", "build", effect=lambda call: make_build(project / "web-dashboard"))
    return fake_runner


@pytest.fixture(autouse=True)
def _reset_dash_deploy_logging():  # noqa: ANN202
    yield
    pkg_logger = logging.getLogger("dash_deploy")
    for handler in list(pkg_logger.handlers):
        if getattr(handler, "_dash_deploy", False):
            pkg_logger.removeHandler(handler)
    pkg_logger.setLevel(logging.NOTSET)
