"""
errors
------

배포 흐름 전체에서 사용하는 예외 계층.

입력 문제는 ValueError 계열, 외부 명령/응답 문제는 RuntimeError 계열로 맞춘다.
"""

from __future__ import annotations

from typing import Sequence


class DeployError(RuntimeError):
    """배포 단계에서 발생하는 모든 오류의 공통 부모."""


class InvalidArgumentError(DeployError, ValueError):
    """잘못된 입력값 (컴포넌트 이름, 비어있는 deliverables 등)."""


class NotFoundError(DeployError):
    """app.yaml 후보 중 사용할 수 있는 파일이 없을 때."""


class ExternalToolError(DeployError):
    """gcloud 호출이 실패했을 때 (exit != 0, 실행 불가, 타임아웃)."""

    def __init__(
        self,
        message: str,
        *,
        cmd: Sequence[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.cmd = list(cmd) if cmd is not None else []
        self.returncode = returncode
        self.stderr = stderr


class UnexpectedResponseError(DeployError):
    """명령은 성공했지만 출력이 기대한 JSON 형태가 아닐 때."""


class FileAccessError(DeployError):
    """app.yaml 이나 임시 사본을 읽고/쓰고/지우는 중 OS 오류가 났을 때."""
