from __future__ import annotations

import subprocess
from dataclasses import dataclass
from textwrap import shorten
from typing import Mapping, Sequence

from .errors import ExternalToolError
from .logging_utils import get_logger


logger = get_logger(__name__)


DEFAULT_TIMEOUT_SECONDS = 1800.0


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str


def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
) -> RunResult:
    """
    subprocess 실행 공통 유틸.

    stdout/stderr 를 캡처해서 그대로 돌려준다. exit code 가 0 이 아니어도 예외를 던지지 않으며,
    판단은 호출하는 쪽에서 한다. 명령 자체를 실행할 수 없거나 timeout 을 넘기면
    ExternalToolError 로 래핑한다.
    """
    logger.info("명령 실행: %s", " ".join(cmd))
    try:
        result = subprocess.run(  # noqa: S603
            list(cmd),
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd or None,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError as e:
        raise ExternalToolError(
            f"필요한 명령을 찾을 수 없습니다: {cmd[0]} (gcloud 가 설치되어 있는지 확인하세요)",
            cmd=cmd,
        ) from e
    except subprocess.TimeoutExpired as e:
        raise ExternalToolError(
            f"명령 실행이 {timeout}초 안에 끝나지 않았습니다: {' '.join(cmd)}",
            cmd=cmd,
        ) from e

    if result.stdout:
        logger.debug("명령 stdout: %s", shorten(result.stdout.strip(), width=2000))
    if result.stderr:
        logger.debug("명령 stderr: %s", shorten(result.stderr.strip(), width=2000))

    return RunResult(
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )


def check_result(cmd: Sequence[str], result: RunResult) -> RunResult:
    """
    exit code 가 0 이 아니면 stderr 를 그대로 담아 ExternalToolError 를 던진다.
    """
    if result.returncode == 0:
        return result
    stderr = result.stderr.strip()
    detail = "\nstderr:\n" + stderr if stderr else ""
    raise ExternalToolError(
        f"명령 실행 실패: {' '.join(cmd)} (exit={result.returncode}){detail}",
        cmd=cmd,
        returncode=result.returncode,
        stderr=result.stderr,
    )
