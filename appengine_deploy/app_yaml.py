"""
app_yaml
--------

app.yaml(배포 descriptor) 탐색, env_variables 병합, 임시 작업 사본 생성을 담당하는 모듈.

파일 시스템 접근은 read_file / list_files / is_dir / write_file / remove_file 콜백으로만 하므로
테스트에서 손쉽게 대체할 수 있다. 이 콜백의 OS 오류는 FileAccessError 로 바꿔 던진다.
"""

from __future__ import annotations

import os
import re
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

import yaml

from .errors import FileAccessError, InvalidArgumentError, NotFoundError
from .logging_utils import get_logger


logger = get_logger(__name__)


ENV_VARIABLES_KEY = "env_variables"
BUILD_ENV_VARIABLES_KEY = "build_env_variables"

# app.yaml, app.yml, app-dev.yaml, app_prod.yml, app.staging.yaml ...
APP_YAML_NAME = re.compile(r"^app(?:[-_.][^/\\]*)?\.ya?ml$", re.IGNORECASE)

# 디렉토리 listing 에서 가장 먼저 고려할 파일 이름
_PRIMARY_NAMES = ("app.yaml", "app.yml")


ReadFile = Callable[[str], bytes]
ListFiles = Callable[[str], Sequence[str]]
WriteFile = Callable[[str, bytes], None]
RemoveFile = Callable[[str], None]
IsDir = Callable[[str], bool]


def read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def list_files(directory: str) -> List[str]:
    return [
        os.path.join(directory, name)
        for name in os.listdir(directory)
        if os.path.isfile(os.path.join(directory, name))
    ]


def is_dir(path: str) -> bool:
    return os.path.isdir(path)


def write_file(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def remove_file(path: str) -> None:
    os.remove(path)


def is_app_yaml_name(path: str) -> bool:
    return bool(APP_YAML_NAME.match(os.path.basename(path)))


def order_directory_listing(paths: Sequence[str]) -> List[str]:
    """
    디렉토리 listing 순서는 OS 마다 다르므로 고정된 순서로 정렬한다.
    app.yaml / app.yml 을 맨 앞에 두고, 나머지는 이름순.
    """
    def _key(p: str) -> tuple[int, str]:
        name = os.path.basename(p).lower()
        rank = _PRIMARY_NAMES.index(name) if name in _PRIMARY_NAMES else len(_PRIMARY_NAMES)
        return rank, name

    return sorted(paths, key=_key)


def discover_candidates(
    deliverables: Sequence[str],
    *,
    base_dir: str = ".",
    listdir: ListFiles = list_files,
    isdir: IsDir = is_dir,
) -> List[str]:
    """
    deliverables 로부터 app.yaml 후보 경로 목록을 만든다.

    파일은 그대로, 디렉토리는 내부 파일 listing 으로 펼친다.
    반환되는 경로는 base_dir 기준으로 해석된 경로다.
    """
    candidates: List[str] = []
    for item in deliverables:
        path = os.path.join(base_dir, item)
        if isdir(path):
            try:
                listing = listdir(path)
            except OSError as e:
                raise FileAccessError(f"디렉토리를 읽을 수 없습니다: {path} ({e})") from e
            candidates.extend(order_directory_listing(listing))
        else:
            candidates.append(path)
    return candidates


def _load_mapping(contents: bytes | str) -> Optional[Dict[str, Any]]:
    try:
        parsed = yaml.safe_load(contents)
    except yaml.YAMLError:
        return None
    if isinstance(parsed, dict):
        return parsed
    return None


def find_app_yaml(candidates: Sequence[str], *, reader: ReadFile = read_file) -> str:
    """
    후보 경로 중 실제 app.yaml 로 쓸 파일 하나를 고른다.

    1. 파일 이름이 app(-suffix).yaml 형태여야 한다.
    2. 내용이 YAML mapping 으로 파싱되어야 한다.

    조건을 만족하는 파일이 여러 개면 입력 순서상 첫 번째를 반환한다.
    """
    for path in candidates:
        if not is_app_yaml_name(path):
            continue
        try:
            contents = reader(path)
        except OSError as e:
            logger.debug("app.yaml 후보를 읽을 수 없어 건너뜁니다: %s (%s)", path, e)
            continue
        if _load_mapping(contents) is None:
            logger.debug("YAML mapping 이 아니어서 건너뜁니다: %s", path)
            continue
        logger.info("app.yaml 로 사용할 파일: %s", path)
        return path

    raise NotFoundError(
        "app.yaml 을 찾지 못했습니다 (could not find an appyaml in ["
        + ", ".join(candidates)
        + "])"
    )


def update_env_vars(
    existing: Optional[Mapping[str, Any]],
    overrides: Mapping[str, str],
) -> Dict[str, str]:
    """
    existing 위에 overrides 를 덮어쓴 새 dict 를 반환한다.
    키가 겹치면 overrides 가 이긴다. 두 입력은 변경하지 않는다.
    """
    merged: Dict[str, str] = {}
    for key, value in (existing or {}).items():
        merged[str(key)] = "" if value is None else str(value)
    for key, value in overrides.items():
        merged[key] = value
    return merged


def load_descriptor(path: str, *, reader: ReadFile = read_file) -> Dict[str, Any]:
    try:
        contents = reader(path)
    except OSError as e:
        raise FileAccessError(f"app.yaml 을 읽을 수 없습니다: {path} ({e})") from e

    doc = _load_mapping(contents)
    if doc is None:
        raise InvalidArgumentError(f"app.yaml 이 YAML mapping 이 아닙니다: {path}")
    return doc


def merge_descriptor(
    doc: Mapping[str, Any],
    *,
    env_vars: Mapping[str, str],
    build_env_vars: Mapping[str, str],
) -> Dict[str, Any]:
    """
    descriptor 의 env_variables / build_env_variables 에 값을 병합한 사본을 만든다.
    나머지 키는 건드리지 않는다.
    """
    merged = dict(doc)
    for key, overrides in (
        (ENV_VARIABLES_KEY, env_vars),
        (BUILD_ENV_VARIABLES_KEY, build_env_vars),
    ):
        if not overrides:
            continue
        existing = merged.get(key)
        if existing is not None and not isinstance(existing, Mapping):
            raise InvalidArgumentError(f"app.yaml 의 {key} 는 mapping 이어야 합니다.")
        merged[key] = update_env_vars(existing, overrides)
    return merged


def dump_descriptor(doc: Mapping[str, Any]) -> bytes:
    return yaml.safe_dump(dict(doc), sort_keys=False, allow_unicode=True).encode("utf-8")


@contextmanager
def working_copy(
    descriptor_path: str,
    data: bytes,
    *,
    writer: WriteFile = write_file,
    remover: RemoveFile = remove_file,
) -> Iterator[str]:
    """
    descriptor 와 같은 디렉토리에 병합된 임시 사본을 쓰고, 블록이 끝나면 반드시 지운다.
    원본 app.yaml 은 수정하지 않는다.
    """
    directory, name = os.path.split(os.path.abspath(descriptor_path))
    stem, ext = os.path.splitext(name)
    copy_path = os.path.join(directory, f".{stem}-{uuid.uuid4().hex[:8]}{ext}")

    try:
        writer(copy_path, data)
    except OSError as e:
        _remove_quietly(copy_path, remover)
        raise FileAccessError(f"임시 app.yaml 을 쓸 수 없습니다: {copy_path} ({e})") from e

    logger.info("env 가 병합된 임시 app.yaml 생성: %s", copy_path)
    try:
        yield copy_path
    finally:
        try:
            remover(copy_path)
            logger.debug("임시 app.yaml 삭제: %s", copy_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise FileAccessError(f"임시 app.yaml 을 삭제할 수 없습니다: {copy_path} ({e})") from e


def _remove_quietly(path: str, remover: RemoveFile) -> None:
    # 쓰다 만 사본 정리. 원래 오류를 가리지 않도록 삭제 실패는 로그만 남긴다.
    try:
        remover(path)
    except OSError as e:
        logger.debug("임시 app.yaml 정리 실패: %s (%s)", path, e)
