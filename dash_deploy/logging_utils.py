from __future__ import annotations

import logging
import sys

import click


PACKAGE_LOGGER = "dash_deploy"

# INFO 와 WARNING 사이의 커스텀 레벨 (단계 완료 표시용)
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_LEVEL_COLORS = {
    "DEBUG": "white",
    "INFO": "blue",
    "SUCCESS": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red",
}


def _is_tty(stream) -> bool:  # noqa: ANN001
    try:
        return bool(getattr(stream, "isatty") and stream.isatty())
    except Exception:  # noqa: BLE001
        return False


class _ConsoleFormatter(logging.Formatter):
    """
    `[INFO] 메시지` 형태로 레벨 태그를 붙이는 포매터.
    verbose 모드에서는 시간/로거 이름까지 포함한다.
    """

    def __init__(self, *, verbose: bool = False, color: bool = False) -> None:
        if verbose:
            fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        else:
            fmt = "%(message)s"
        super().__init__(fmt)
        self._verbose = verbose
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if self._verbose:
            return text
        tag = f"[{record.levelname}]"
        if self._color:
            tag = click.style(tag, fg=_LEVEL_COLORS.get(record.levelname), bold=True)
        return f"{tag} {text}"


def setup_logging(verbosity: int = 0, *, color: bool | None = None) -> None:
    level = logging.INFO
    if verbosity >= 1:
        level = logging.DEBUG

    stream = sys.stdout
    if color is None:
        color = _is_tty(stream)

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    # 같은 프로세스에서 여러 번 호출되어도 핸들러가 중복되지 않도록 교체한다.
    for handler in list(pkg_logger.handlers):
        if getattr(handler, "_dash_deploy", False):
            pkg_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler._dash_deploy = True  # type: ignore[attr-defined]
    handler.setFormatter(_ConsoleFormatter(verbose=verbosity >= 1, color=color))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_success(logger: logging.Logger, msg: str, *args) -> None:  # noqa: ANN002
    logger.log(SUCCESS, msg, *args)
