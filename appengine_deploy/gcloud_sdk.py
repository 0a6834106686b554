"""
gcloud_sdk
----------

gcloud CLI 설치/컴포넌트/인증 상태를 확인하고, gcloud 명령을 실행하는 래퍼.

GcloudSDK 인스턴스가 확인된 설치 상태(버전, 설치된 컴포넌트)를 캐시하므로
전역 상태 없이 배포 흐름마다 주입해서 사용한다.
"""

from __future__ import annotations

import json
import os
from typing import Callable, List, Optional, Sequence, Set

from .errors import ExternalToolError
from .logging_utils import get_logger
from .subprocess_utils import DEFAULT_TIMEOUT_SECONDS, RunResult, check_result, run_command


logger = get_logger(__name__)


CREDENTIALS_ENV_VARS = ("GOOGLE_GHA_CREDS_PATH", "GOOGLE_APPLICATION_CREDENTIALS")

Runner = Callable[..., RunResult]


class GcloudSDK:
    def __init__(
        self,
        *,
        executable: str = "gcloud",
        runner: Runner = run_command,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self._runner = runner
        self._version: Optional[str] = None
        self._components: Set[str] = set()

    def command(self, args: Sequence[str]) -> List[str]:
        return [self.executable, *args]

    def execute(self, args: Sequence[str], *, cwd: Optional[str] = None) -> RunResult:
        """gcloud 를 실행하고 결과를 그대로 돌려준다 (exit code 검사는 호출자 몫)."""
        return self._runner(self.command(args), cwd=cwd, timeout=self.timeout)

    def _execute_checked(self, args: Sequence[str]) -> RunResult:
        cmd = self.command(args)
        return check_result(cmd, self._runner(cmd, timeout=self.timeout))

    def ensure_installed(self, version: Optional[str] = None) -> str:
        """
        gcloud 가 실행 가능한지 확인하고 설치된 SDK 버전을 반환한다.
        설치 자체는 하지 않는다. 원하는 버전과 다르면 경고만 남긴다.
        """
        if self._version is None:
            try:
                result = self._execute_checked(["version", "--format", "json"])
            except ExternalToolError as e:
                raise ExternalToolError(
                    "gcloud CLI 를 실행할 수 없습니다. Cloud SDK 가 설치되어 PATH 에 있는지 확인하세요.\n"
                    + str(e),
                    cmd=e.cmd,
                    returncode=e.returncode,
                    stderr=e.stderr,
                ) from e

            try:
                info = json.loads(result.stdout or "{}")
            except json.JSONDecodeError:
                info = {}

            self._version = str(info.get("Google Cloud SDK", "unknown"))
            self._components.update(k for k in info if k != "Google Cloud SDK")
            logger.info("gcloud SDK 버전: %s", self._version)

        if version and version != "latest" and version != self._version:
            logger.warning(
                "요청한 gcloud 버전(%s)과 설치된 버전(%s)이 다릅니다. 설치된 버전을 사용합니다.",
                version,
                self._version,
            )
        return self._version

    def ensure_component(self, name: str) -> None:
        if name in self._components:
            logger.debug("gcloud 컴포넌트가 이미 설치되어 있습니다: %s", name)
            return
        logger.info("gcloud 컴포넌트 설치: %s", name)
        self._execute_checked(["components", "install", name, "--quiet"])
        self._components.add(name)

    def authenticate(self, credentials_path: Optional[str] = None) -> None:
        """
        자격 증명 파일이 있으면 gcloud auth login --cred-file 로 로그인한다.
        없으면 이미 설정된 gcloud 인증을 그대로 사용한다.
        """
        path = credentials_path
        if not path:
            for name in CREDENTIALS_ENV_VARS:
                if os.getenv(name):
                    path = os.getenv(name)
                    break

        if not path:
            logger.info("자격 증명 파일이 지정되지 않아 기존 gcloud 인증을 사용합니다.")
            return

        logger.info("gcloud 인증: %s", path)
        self._execute_checked(["auth", "login", f"--cred-file={path}", "--quiet"])
