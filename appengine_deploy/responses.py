"""
responses
---------

gcloud app deploy / app versions describe 의 JSON 출력을 검증하고
필요한 필드만 뽑아내는 모듈.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import UnexpectedResponseError
from .logging_utils import get_logger


logger = get_logger(__name__)

_M = TypeVar("_M", bound=BaseModel)


class DeployedVersion(BaseModel):
    """deploy 응답의 versions[] 항목."""

    model_config = ConfigDict(extra="ignore")

    id: str
    project: str
    service: str


class DeployResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    versions: List[DeployedVersion] = []


class VersionDescription(BaseModel):
    """app versions describe 응답. name / id 외에는 없어도 된다."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    id: str = Field(min_length=1)
    runtime: Optional[str] = None
    serviceAccount: Optional[str] = None
    servingStatus: Optional[str] = None
    versionUrl: Optional[str] = None


@dataclass(frozen=True)
class DeployOutputs:
    name: str
    runtime: str
    service_account_email: str
    serving_status: str
    version_id: str
    version_url: str
    url: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


def _parse(stdout: str, model: Type[_M], what: str) -> _M:
    try:
        payload: Any = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise UnexpectedResponseError(f"{what} 출력이 JSON 이 아닙니다: {e}") from e

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise UnexpectedResponseError(f"{what} 출력 형식이 예상과 다릅니다:\n{e}") from e


def parse_deploy_response(stdout: str) -> DeployResponse:
    return _parse(stdout, DeployResponse, "gcloud app deploy")


def select_version(
    response: DeployResponse,
    *,
    version_id: Optional[str] = None,
    project: Optional[str] = None,
    service: Optional[str] = None,
) -> DeployedVersion:
    """
    deploy 응답에서 describe 대상 버전 하나를 고른다.

    버전이 하나뿐이면 그대로 사용하고, 여러 개면 주어진 기준
    (version / project / service)으로 걸러서 정확히 하나가 남아야 한다.
    """
    versions = response.versions
    logger.debug("deploy 응답 versions: %s", [v.model_dump() for v in versions])
    if not versions:
        raise UnexpectedResponseError("deploy 응답에 versions 가 없습니다.")
    if len(versions) == 1:
        return versions[0]

    matched = [
        v
        for v in versions
        if (not version_id or v.id == version_id)
        and (not project or v.project == project)
        and (not service or v.service == service)
    ]
    if len(matched) != 1:
        found = ", ".join(f"{v.project}/{v.service}/{v.id}" for v in versions)
        raise UnexpectedResponseError(
            f"deploy 응답에서 버전을 하나로 특정할 수 없습니다 "
            f"(후보 {len(versions)}개, 일치 {len(matched)}개): {found}"
        )
    return matched[0]


def parse_describe_response(stdout: str) -> VersionDescription:
    return _parse(stdout, VersionDescription, "gcloud app versions describe")


def to_outputs(desc: VersionDescription) -> DeployOutputs:
    url = desc.versionUrl or ""
    return DeployOutputs(
        name=desc.name,
        runtime=desc.runtime or "",
        service_account_email=desc.serviceAccount or "",
        serving_status=desc.servingStatus or "",
        version_id=desc.id,
        version_url=url,
        url=url,
    )
