"""
command
-------

gcloud app deploy / gcloud app versions describe 인자 목록을 조립하는 모듈.

deploy 인자 순서는 항상 아래와 같다.

    [component] app deploy --quiet --format json
    [--project P] [--image-url I] [--version V] (--promote | --no-promote)
    <deliverables...> <추가 flags...>
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .deliverables import parse_flags
from .errors import InvalidArgumentError


ALLOWED_COMPONENTS: Tuple[str, ...] = ("alpha", "beta")


def validate_component(component: Optional[str]) -> Optional[str]:
    """
    gcloud_component 입력을 검증한다. 빈 값은 None (기본 컴포넌트 사용).
    """
    value = (component or "").strip()
    if not value:
        return None
    if value not in ALLOWED_COMPONENTS:
        raise InvalidArgumentError(
            f"gcloud_component 값이 올바르지 않습니다 "
            f"(invalid value for gcloud_component: {value}). "
            f"허용값: {', '.join(ALLOWED_COMPONENTS)}"
        )
    return value


@dataclass(frozen=True)
class DeployCommandSpec:
    deliverables: Sequence[str]
    project_id: Optional[str] = None
    image_url: Optional[str] = None
    version: Optional[str] = None
    promote: bool = True
    flags: Optional[str] = None
    component: Optional[str] = None


def _component_prefix(component: Optional[str]) -> List[str]:
    return [component] if component else []


def build_deploy_args(spec: DeployCommandSpec) -> List[str]:
    if not spec.deliverables:
        raise InvalidArgumentError("deliverables 가 비어 있습니다. 최소 한 개의 app.yaml 이 필요합니다.")

    args = _component_prefix(validate_component(spec.component))
    args += ["app", "deploy", "--quiet", "--format", "json"]

    for flag, value in (
        ("--project", spec.project_id),
        ("--image-url", spec.image_url),
        ("--version", spec.version),
    ):
        if value:
            args += [flag, value]

    args.append("--promote" if spec.promote else "--no-promote")
    args += list(spec.deliverables)
    args += parse_flags(spec.flags)
    return args


def build_describe_args(
    *,
    project: str,
    service: str,
    version_id: str,
    component: Optional[str] = None,
) -> List[str]:
    args = _component_prefix(validate_component(component))
    args += [
        "app",
        "versions",
        "describe",
        version_id,
        "--project",
        project,
        "--service",
        service,
        "--format",
        "json",
    ]
    return args
