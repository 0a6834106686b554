"""
deliverables
------------

사용자가 자유 형식으로 입력한 deliverables / flags 문자열을
gcloud 에 넘길 토큰 목록으로 바꾸는 순수 함수 모음.
"""

from __future__ import annotations

import re
from typing import List


# 쉼표, 공백, 줄바꿈이 섞여 있어도 하나의 경계로 취급한다.
_DELIVERABLE_SEPARATORS = re.compile(r"[,\s]+")

# 따옴표 구간은 통째로, 그 외에는 공백과 '=' 기준으로 자른다.
_FLAG_TOKEN = re.compile(r"""(?:"[^"]*"|'[^']*'|[^\s="']+)+""")


def parse_deliverables(raw: str | None) -> List[str]:
    """
    "app.yaml,\\nfoo.yaml,   bar.yaml" -> ["app.yaml", "foo.yaml", "bar.yaml"]

    빈 문자열은 빈 리스트가 된다. 순서는 입력 순서를 그대로 유지한다.
    """
    if not raw:
        return []
    return [tok.strip() for tok in _DELIVERABLE_SEPARATORS.split(raw) if tok.strip()]


def parse_flags(raw: str | None) -> List[str]:
    """
    gcloud 에 그대로 전달할 추가 플래그 문자열을 토큰으로 나눈다.

    "--log-http   --foo=bar" -> ["--log-http", "--foo", "bar"]
    '--labels "a b"'         -> ["--labels", "a b"]
    """
    if not raw:
        return []

    tokens: List[str] = []
    for match in _FLAG_TOKEN.finditer(raw):
        tok = match.group(0)
        # 토큰 내부의 따옴표만 벗겨낸다.
        tok = re.sub(r"""^(["'])(.*)\1$""", r"\2", tok)
        if tok:
            tokens.append(tok)
    return tokens
