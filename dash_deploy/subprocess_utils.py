from __future__ import annotations

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from textwrap import shorten
from typing import Mapping, Sequence

from .logging_utils import get_logger


logger = get_logger(__name__)

# 로케일과 무관하게 디코딩하고, 깨진 바이트는 U+FFFD 로 바꾼다.
OUTPUT_ENCODING = "utf-8"


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def command_exists(name: str) -> bool:
    """PATH 에서 실행 파일을 찾을 수 있는지 여부."""
    return shutil.which(name) is not None


def merged_env(extra: Mapping[str, str] | None) -> dict[str, str] | None:
    """현재 프로세스 환경에 extra 를 덮어쓴 사본. extra 가 없으면 None(상속)."""
    if not extra:
        return None
    env = dict(os.environ)
    env.update(extra)
    return env


def _not_found(cmd: Sequence[str]) -> RuntimeError:
    return RuntimeError(
        f"필요한 명령을 찾을 수 없습니다: {cmd[0]} (node/npm/netlify 가 설치되어 있는지 확인하세요)"
    )


def _failed(cmd: Sequence[str], returncode: int, output: str, label: str) -> RuntimeError:
    output = output.strip()
    detail = f"\n{label}:\n" + shorten(output, width=2000) if output else ""
    return RuntimeError(f"명령 실행 실패: {' '.join(cmd)} (exit={returncode}){detail}")


def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
    stream_output: bool = False,
    interactive: bool = False,
) -> RunResult:
    """
    subprocess 실행 공통 유틸.

    - stream_output=False: stdout/stderr 캡처, 실패 시 요약 포함
    - stream_output=True : stdout/stderr 를 합쳐 실시간으로 터미널(sys.stdout)에 흘린다
    - interactive=True   : 표준 입출력을 그대로 물려준다 (로그인 프롬프트 등)

    check=True 이면 exit != 0 에서 RuntimeError, False 이면 결과를 그대로 돌려준다.
    env 는 현재 환경 위에 덮어쓸 변수만 전달한다.
    타임아웃은 두지 않는다. 명령은 끝날 때까지 기다린다.
    """
    logger.debug("명령 실행: %s (cwd=%s)", " ".join(cmd), cwd or ".")
    full_env = merged_env(env)

    if interactive:
        try:
            proc = subprocess.run(list(cmd), cwd=cwd, env=full_env)  # noqa: S603
        except FileNotFoundError as e:
            raise _not_found(cmd) from e
        if check and proc.returncode != 0:
            raise _failed(cmd, proc.returncode, "", "output")
        return RunResult(returncode=proc.returncode, stdout="", stderr="")

    if stream_output:
        # npm 은 stderr 로도 진행 로그를 자주 내보내므로 STDOUT 으로 합친다.
        try:
            proc = subprocess.Popen(  # noqa: S603
                list(cmd),
                cwd=cwd,
                env=full_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding=OUTPUT_ENCODING,
                errors="replace",
                bufsize=1,
            )
        except FileNotFoundError as e:
            raise _not_found(cmd) from e

        out_lines: list[str] = []
        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                out_lines.append(line)
                sys.stdout.write(line)
                sys.stdout.flush()
            returncode = proc.wait()
        finally:
            if proc.stdout is not None:
                proc.stdout.close()
            if proc.poll() is None:
                proc.kill()
                proc.wait()

        combined = "".join(out_lines)
        if check and returncode != 0:
            raise _failed(cmd, returncode, combined, "stdout/stderr")
        return RunResult(returncode=returncode, stdout=combined, stderr="")

    # capture 모드 (조용히 돌리고 실패 시 요약)
    try:
        result = subprocess.run(  # noqa: S603
            list(cmd),
            capture_output=True,
            text=True,
            encoding=OUTPUT_ENCODING,
            errors="replace",
            cwd=cwd,
            env=full_env,
        )
    except FileNotFoundError as e:
        raise _not_found(cmd) from e

    if result.stdout:
        logger.debug("명령 stdout: %s", shorten(result.stdout.strip(), width=2000))
    if result.stderr:
        logger.debug("명령 stderr: %s", shorten(result.stderr.strip(), width=2000))

    if check and result.returncode != 0:
        stderr = (result.stderr or "").strip()
        if stderr:
            raise _failed(cmd, result.returncode, stderr, "stderr")
        raise _failed(cmd, result.returncode, result.stdout or "", "stdout")

    return RunResult(
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )
