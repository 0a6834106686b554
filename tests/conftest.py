"""
pytest 설정:

로컬 작업 환경에 설치된 다른 버전의 appengine_deploy 패키지가 존재할 때,
site-packages 쪽이 먼저 import 되지 않도록 repo root 를 sys.path 최상단에 고정한다.

배포 흐름 테스트에서 공통으로 쓰는 gcloud 응답 샘플도 여기 둔다.
"""

from __future__ import annotations

import os
import sys

import pytest


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


DEPLOY_RESPONSE = """
{
  "configs": [],
  "versions": [
    {
      "environment": null,
      "id": "20221215t102539",
      "last_deployed_time": null,
      "project": "my-project",
      "service": "default",
      "service_account": null,
      "traffic_split": null,
      "version": null
    }
  ]
}
"""

DESCRIBE_RESPONSE = """
{
  "createTime": "2022-12-15T15:26:11Z",
  "env": "standard",
  "id": "20221215t102539",
  "instanceClass": "F1",
  "name": "apps/my-project/services/default/versions/20221215t102539",
  "runtime": "nodejs16",
  "serviceAccount": "my-project@appspot.gserviceaccount.com",
  "servingStatus": "SERVING",
  "threadsafe": true,
  "versionUrl": "https://20221215t102539-dot-my-project.appspot.com"
}
"""


@pytest.fixture(autouse=True)
def _clean_input_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # 러너 환경의 INPUT_* / 자격 증명 변수가 테스트에 섞이지 않도록 지운다.
    for key in list(os.environ):
        if key.startswith("INPUT_"):
            monkeypatch.delenv(key, raising=False)
    for key in ("GITHUB_OUTPUT", "GOOGLE_GHA_CREDS_PATH", "GOOGLE_APPLICATION_CREDENTIALS", "DEPLOY_TIMEOUT_SECONDS"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def deploy_response() -> str:
    return DEPLOY_RESPONSE


@pytest.fixture
def describe_response() -> str:
    return DESCRIBE_RESPONSE
