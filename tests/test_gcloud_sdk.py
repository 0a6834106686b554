from typing import List

import pytest

from appengine_deploy.errors import ExternalToolError
from appengine_deploy.gcloud_sdk import GcloudSDK
from appengine_deploy.subprocess_utils import RunResult


def _recording_runner(calls: List[List[str]], version_json: str = '{"Google Cloud SDK": "458.0.1", "core": "x"}'):
    def runner(cmd, **_kwargs) -> RunResult:  # noqa: ANN001
        calls.append(list(cmd))
        if cmd[1] == "version":
            return RunResult(0, version_json, "")
        return RunResult(0, "", "")

    return runner


def test_ensure_installed_is_cached() -> None:
    calls: List[List[str]] = []
    sdk = GcloudSDK(runner=_recording_runner(calls))

    assert sdk.ensure_installed() == "458.0.1"
    assert sdk.ensure_installed("458.0.1") == "458.0.1"
    assert calls == [["gcloud", "version", "--format", "json"]]


def test_ensure_installed_warns_on_version_mismatch(caplog: pytest.LogCaptureFixture) -> None:
    sdk = GcloudSDK(runner=_recording_runner([]))

    with caplog.at_level("WARNING"):
        sdk.ensure_installed("400.0.0")

    assert "400.0.0" in caplog.text


def test_ensure_installed_missing_gcloud() -> None:
    def runner(cmd, **_kwargs) -> RunResult:  # noqa: ANN001
        raise ExternalToolError(f"필요한 명령을 찾을 수 없습니다: {cmd[0]}", cmd=cmd)

    with pytest.raises(ExternalToolError) as excinfo:
        GcloudSDK(runner=runner).ensure_installed()

    assert "gcloud CLI" in str(excinfo.value)


def test_ensure_component_installs_once() -> None:
    calls: List[List[str]] = []
    sdk = GcloudSDK(runner=_recording_runner(calls))

    sdk.ensure_component("beta")
    sdk.ensure_component("beta")

    assert calls == [["gcloud", "components", "install", "beta", "--quiet"]]


def test_ensure_component_skips_already_installed() -> None:
    calls: List[List[str]] = []
    sdk = GcloudSDK(runner=_recording_runner(calls, '{"Google Cloud SDK": "458.0.1", "alpha": "2023.12.01"}'))

    sdk.ensure_installed()
    sdk.ensure_component("alpha")

    assert calls == [["gcloud", "version", "--format", "json"]]


def test_ensure_component_failure() -> None:
    def runner(cmd, **_kwargs) -> RunResult:  # noqa: ANN001
        return RunResult(1, "", "component manager disabled")

    with pytest.raises(ExternalToolError) as excinfo:
        GcloudSDK(runner=runner).ensure_component("alpha")

    assert "component manager disabled" in str(excinfo.value)


def test_authenticate_with_credentials_file(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[List[str]] = []
    monkeypatch.setenv("GOOGLE_GHA_CREDS_PATH", "/tmp/creds.json")

    GcloudSDK(runner=_recording_runner(calls)).authenticate()

    assert calls == [["gcloud", "auth", "login", "--cred-file=/tmp/creds.json", "--quiet"]]


def test_authenticate_without_credentials_uses_existing_login() -> None:
    calls: List[List[str]] = []

    GcloudSDK(runner=_recording_runner(calls)).authenticate()

    assert calls == []


def test_execute_passes_cwd() -> None:
    seen = {}

    def runner(cmd, *, cwd=None, timeout=None) -> RunResult:  # noqa: ANN001
        seen.update(cmd=list(cmd), cwd=cwd, timeout=timeout)
        return RunResult(0, "{}", "")

    GcloudSDK(executable="/opt/gcloud", runner=runner, timeout=60).execute(["app", "deploy"], cwd="svc")

    assert seen == {"cmd": ["/opt/gcloud", "app", "deploy"], "cwd": "svc", "timeout": 60}
