from __future__ import annotations

import os
from contextlib import ExitStack
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from . import app_yaml
from .command import DeployCommandSpec, build_deploy_args, build_describe_args, validate_component
from .config import DeployInputs, parse_kv_string, parse_promote
from .deliverables import parse_deliverables
from .errors import DeployError, InvalidArgumentError
from .gcloud_sdk import GcloudSDK
from .logging_utils import get_logger
from .outputs import publish_outputs
from .responses import (
    DeployOutputs,
    parse_deploy_response,
    parse_describe_response,
    select_version,
    to_outputs,
)
from .subprocess_utils import check_result


logger = get_logger(__name__)


class DeployStage(str, Enum):
    INIT = "init"
    TOOL_READY = "tool_ready"
    DESCRIPTOR_RESOLVED = "descriptor_resolved"
    ENV_MERGED = "env_merged"
    DEPLOYED = "deployed"
    DESCRIBED = "described"
    OUTPUTS_PUBLISHED = "outputs_published"
    FAILED = "failed"


@dataclass
class DeployContext:
    """
    배포 한 번에 필요한 외부 협력자 묶음.

    gcloud 설치 상태 캐시(GcloudSDK)와 파일 접근 함수들을 명시적으로 주입해서
    테스트에서 전역 상태 없이 대체할 수 있게 한다.
    """

    sdk: GcloudSDK = field(default_factory=GcloudSDK)
    read_file: app_yaml.ReadFile = app_yaml.read_file
    list_files: app_yaml.ListFiles = app_yaml.list_files
    is_dir: app_yaml.IsDir = app_yaml.is_dir
    write_file: app_yaml.WriteFile = app_yaml.write_file
    remove_file: app_yaml.RemoveFile = app_yaml.remove_file
    publish: Callable[[Mapping[str, str]], None] = publish_outputs


@dataclass
class _Run:
    stage: DeployStage = DeployStage.INIT

    def advance(self, stage: DeployStage) -> None:
        logger.info("배포 단계: %s -> %s", self.stage.value, stage.value)
        self.stage = stage


@dataclass(frozen=True)
class _ParsedInputs:
    deliverables: List[str]
    component: Optional[str]
    promote: bool
    env_vars: Dict[str, str]
    build_env_vars: Dict[str, str]
    cwd: Optional[str]


def _parse_inputs(inputs: DeployInputs) -> _ParsedInputs:
    """외부 명령을 하나도 실행하기 전에 입력값 검증을 끝낸다."""
    component = validate_component(inputs.gcloud_component)
    deliverables = parse_deliverables(inputs.deliverables)
    if not deliverables:
        raise InvalidArgumentError("deliverables 가 비어 있습니다. 배포할 app.yaml 경로를 지정하세요.")

    return _ParsedInputs(
        deliverables=deliverables,
        component=component,
        promote=parse_promote(inputs.promote),
        env_vars=parse_kv_string(inputs.env_vars),
        build_env_vars=parse_kv_string(inputs.build_env_vars),
        cwd=inputs.working_directory or None,
    )


def _replace_deliverable(
    deliverables: Sequence[str],
    *,
    base_dir: str,
    descriptor: str,
    replacement: str,
) -> List[str]:
    """
    descriptor 를 가리키는 deliverable(파일 자체 또는 그 파일을 담은 디렉토리)을
    replacement 로 바꾼 목록을 만든다.
    """
    target = os.path.abspath(descriptor)
    result: List[str] = []
    replaced = False
    for item in deliverables:
        path = os.path.abspath(os.path.join(base_dir, item))
        if not replaced and (path == target or path == os.path.dirname(target)):
            result.append(replacement)
            replaced = True
        else:
            result.append(item)
    return result


def plan_deploy(inputs: DeployInputs) -> List[str]:
    """
    실제 gcloud 호출 없이, 실행될 deploy 인자 목록만 만들어 돌려준다.
    env 병합용 임시 app.yaml 은 만들지 않으므로 deliverables 는 입력 그대로다.
    """
    parsed = _parse_inputs(inputs)
    return build_deploy_args(
        DeployCommandSpec(
            deliverables=parsed.deliverables,
            project_id=inputs.project_id or None,
            image_url=inputs.image_url or None,
            version=inputs.version or None,
            promote=parsed.promote,
            flags=inputs.flags,
            component=parsed.component,
        )
    )


def run_deploy(inputs: DeployInputs, ctx: Optional[DeployContext] = None) -> DeployOutputs:
    """
    app.yaml 탐색/env 병합 -> gcloud app deploy -> gcloud app versions describe
    순서로 실행하고, 최종 출력값을 publish 한 뒤 반환한다.

    어느 단계에서든 실패하면 DeployError 를 그대로 던지고 출력값은 publish 하지 않는다.
    """
    ctx = ctx or DeployContext()
    run = _Run()

    try:
        parsed = _parse_inputs(inputs)
        base_dir = parsed.cwd or "."

        ctx.sdk.ensure_installed(inputs.gcloud_version or None)
        if parsed.component:
            ctx.sdk.ensure_component(parsed.component)
        ctx.sdk.authenticate()
        run.advance(DeployStage.TOOL_READY)

        deliverables = list(parsed.deliverables)
        service: Optional[str] = None

        with ExitStack() as stack:
            if parsed.env_vars or parsed.build_env_vars:
                candidates = app_yaml.discover_candidates(
                    deliverables, base_dir=base_dir, listdir=ctx.list_files, isdir=ctx.is_dir
                )
                descriptor = app_yaml.find_app_yaml(candidates, reader=ctx.read_file)
                doc = app_yaml.load_descriptor(descriptor, reader=ctx.read_file)
                service = str(doc.get("service") or "default")
                run.advance(DeployStage.DESCRIPTOR_RESOLVED)

                merged = app_yaml.merge_descriptor(
                    doc,
                    env_vars=parsed.env_vars,
                    build_env_vars=parsed.build_env_vars,
                )
                copy_path = stack.enter_context(
                    app_yaml.working_copy(
                        descriptor,
                        app_yaml.dump_descriptor(merged),
                        writer=ctx.write_file,
                        remover=ctx.remove_file,
                    )
                )
                deliverables = _replace_deliverable(
                    deliverables,
                    base_dir=base_dir,
                    descriptor=descriptor,
                    replacement=copy_path,
                )
                run.advance(DeployStage.ENV_MERGED)
            else:
                run.advance(DeployStage.DESCRIPTOR_RESOLVED)

            deploy_args = build_deploy_args(
                DeployCommandSpec(
                    deliverables=deliverables,
                    project_id=inputs.project_id or None,
                    image_url=inputs.image_url or None,
                    version=inputs.version or None,
                    promote=parsed.promote,
                    flags=inputs.flags,
                    component=parsed.component,
                )
            )
            deploy_result = check_result(
                ctx.sdk.command(deploy_args),
                ctx.sdk.execute(deploy_args, cwd=parsed.cwd),
            )

        version = select_version(
            parse_deploy_response(deploy_result.stdout),
            version_id=inputs.version or None,
            project=inputs.project_id or None,
            service=service,
        )
        run.advance(DeployStage.DEPLOYED)
        logger.info(
            "배포된 버전: project=%s service=%s version=%s",
            version.project,
            version.service,
            version.id,
        )

        describe_args = build_describe_args(
            project=version.project,
            service=version.service,
            version_id=version.id,
            component=parsed.component,
        )
        describe_result = check_result(
            ctx.sdk.command(describe_args),
            ctx.sdk.execute(describe_args, cwd=parsed.cwd),
        )
        outputs = to_outputs(parse_describe_response(describe_result.stdout))
        run.advance(DeployStage.DESCRIBED)

        ctx.publish(outputs.as_dict())
        run.advance(DeployStage.OUTPUTS_PUBLISHED)
        return outputs
    except DeployError as e:
        logger.error("배포 실패 (단계=%s): %s", run.stage.value, e)
        run.advance(DeployStage.FAILED)
        raise
    except Exception:
        logger.exception("배포 중 예상하지 못한 오류 (단계=%s)", run.stage.value)
        run.advance(DeployStage.FAILED)
        raise
