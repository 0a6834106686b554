from __future__ import annotations

import os
import re
from dataclasses import dataclass, fields, replace
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .errors import InvalidArgumentError


ENV_FILES_DEFAULT_ORDER = [".env", ".env.deploy"]

_TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "n", "no", "off"}

# 역슬래시로 escape 되지 않은 쉼표 또는 줄바꿈
_KV_SEPARATOR = re.compile(r"(?<!\\),|\r?\n")


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _input_env_name(name: str) -> str:
    # CI 러너 관례: project_id -> INPUT_PROJECT_ID
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str) -> str:
    return (os.getenv(_input_env_name(name)) or "").strip()


def parse_promote(raw: Optional[str]) -> bool:
    """
    promote 입력(true / false / 빈값)을 bool 로 바꾼다. 빈값은 True.
    """
    value = (raw or "").strip().lower()
    if not value:
        return True
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidArgumentError(f"promote 값이 올바르지 않습니다: {raw!r} (true | false)")


def parse_kv_string(raw: Optional[str]) -> Dict[str, str]:
    """
    "FOO=bar, ZIP=zap" 또는 줄바꿈으로 구분된 KEY=VALUE 목록을 dict 로 파싱한다.
    값 안의 쉼표는 "\\," 로 escape 한다.
    """
    result: Dict[str, str] = {}
    if not raw or not raw.strip():
        return result

    for entry in _KV_SEPARATOR.split(raw):
        entry = entry.strip()
        if not entry:
            continue
        if "=" not in entry:
            raise InvalidArgumentError(f"KEY=VALUE 형식이 아닙니다: {entry!r}")
        key, value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise InvalidArgumentError(f"키가 비어 있습니다: {entry!r}")
        result[key] = value.strip().replace("\\,", ",")
    return result


@dataclass(frozen=True)
class DeployInputs:
    """배포 입력값. 모두 원본 문자열 그대로 보관하고, 해석은 사용하는 쪽에서 한다."""

    deliverables: str = ""
    project_id: str = ""
    working_directory: str = ""
    image_url: str = ""
    env_vars: str = ""
    build_env_vars: str = ""
    version: str = ""
    promote: str = ""
    flags: str = ""
    gcloud_component: str = ""
    gcloud_version: str = ""

    @classmethod
    def from_env(cls) -> "DeployInputs":
        return cls(**{f.name: get_input(f.name) for f in fields(cls)})

    def with_overrides(self, **overrides: Optional[str]) -> "DeployInputs":
        """None 이 아닌 값만 덮어쓴 새 DeployInputs 를 돌려준다. (CLI 옵션 > env)"""
        given = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **given)


def timeout_from_env(default: float) -> float:
    raw = os.getenv("DEPLOY_TIMEOUT_SECONDS")
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"DEPLOY_TIMEOUT_SECONDS 값이 숫자가 아닙니다: {raw!r}") from e
