"""
outputs
-------

배포 결과를 이름 있는 출력값으로 내보낸다.

GITHUB_OUTPUT 파일이 지정되어 있으면 거기에 key=value 로 append 하고,
아니면 stdout 에 출력한다.
"""

from __future__ import annotations

import os
import uuid
from typing import Mapping, Optional

import click

from .logging_utils import get_logger


logger = get_logger(__name__)


def format_output(key: str, value: str) -> str:
    if "\n" not in value:
        return f"{key}={value}\n"
    # 여러 줄 값은 heredoc 구분자 형식을 쓴다.
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"


def publish_outputs(values: Mapping[str, str], output_path: Optional[str] = None) -> None:
    path = output_path if output_path is not None else os.getenv("GITHUB_OUTPUT")
    lines = "".join(format_output(k, v) for k, v in values.items())

    if path:
        with open(path, "a", encoding="utf-8") as f:
            f.write(lines)
        logger.info("출력값 %d개를 기록했습니다: %s", len(values), path)
        return

    click.echo(lines, nl=False)
