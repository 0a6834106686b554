import shlex
import sys
from typing import Any, Callable, Optional

import click

from .config import DeployInputs, load_env_files, timeout_from_env
from .errors import DeployError
from .gcloud_sdk import GcloudSDK
from .logging_utils import get_logger, setup_logging
from .orchestrator import DeployContext, plan_deploy, run_deploy
from .subprocess_utils import DEFAULT_TIMEOUT_SECONDS


logger = get_logger(__name__)


_INPUT_OPTIONS = [
    click.option("--deliverables", default=None, help="배포할 yaml 경로 목록 (쉼표/공백/줄바꿈 구분). 기본: INPUT_DELIVERABLES"),
    click.option("--project-id", "project_id", default=None, help="GCP 프로젝트 ID"),
    click.option("--working-directory", "working_directory", default=None, help="gcloud 를 실행할 디렉토리"),
    click.option("--image-url", "image_url", default=None, help="미리 빌드된 컨테이너 이미지 URL"),
    click.option("--env-vars", "env_vars", default=None, help="app.yaml env_variables 에 병합할 KEY=VALUE 목록"),
    click.option("--build-env-vars", "build_env_vars", default=None, help="app.yaml build_env_variables 에 병합할 KEY=VALUE 목록"),
    click.option("--version", "version", default=None, help="배포 버전 ID"),
    click.option("--promote", "promote", default=None, help="트래픽 전환 여부 (true | false, 기본 true)"),
    click.option("--flags", "flags", default=None, help="gcloud app deploy 에 그대로 넘길 추가 플래그"),
    click.option("--gcloud-component", "gcloud_component", default=None, help="alpha | beta"),
    click.option("--gcloud-version", "gcloud_version", default=None, help="기대하는 gcloud SDK 버전"),
]


def _input_options(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(_INPUT_OPTIONS):
        func = option(func)
    return func


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help=".env 파일을 읽을 디렉토리 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다.",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """Google App Engine 배포용 CLI (gcloud app deploy 래퍼)"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


def _load_inputs(ctx: click.Context, **options: Optional[str]) -> DeployInputs:
    load_env_files(ctx.obj["chdir"])
    inputs = DeployInputs.from_env().with_overrides(**options)
    logger.debug("Inputs loaded: %s", inputs)
    return inputs


@main.command()
@_input_options
@click.pass_context
def plan(ctx: click.Context, **options: Optional[str]) -> None:
    """gcloud 를 호출하지 않고, 실행될 deploy 명령만 출력"""
    inputs = _load_inputs(ctx, **options)
    try:
        args = plan_deploy(inputs)
    except DeployError as e:
        click.echo(f"[ERROR] 입력값 검증 실패: {e}", err=True)
        sys.exit(1)

    click.echo(shlex.join(["gcloud", *args]))


@main.command(name="deploy")
@_input_options
@click.pass_context
def deploy(ctx: click.Context, **options: Optional[str]) -> None:
    """app.yaml 을 배포하고 버전 정보를 출력값으로 내보냄"""
    inputs = _load_inputs(ctx, **options)

    try:
        deploy_ctx = DeployContext(sdk=GcloudSDK(timeout=timeout_from_env(DEFAULT_TIMEOUT_SECONDS)))
        outputs = run_deploy(inputs, deploy_ctx)
    except DeployError as e:
        click.echo(f"[ERROR] 배포 실패: {e}", err=True)
        sys.exit(1)
    except Exception as e:  # noqa: BLE001
        logger.exception("배포 중 오류 발생")
        click.echo(f"[ERROR] 배포 실패: {e}", err=True)
        sys.exit(1)

    logger.info("배포 완료: %s", outputs.version_url or outputs.name)
