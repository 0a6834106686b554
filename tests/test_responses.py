import json

import pytest

from appengine_deploy.errors import UnexpectedResponseError
from appengine_deploy.responses import (
    parse_deploy_response,
    parse_describe_response,
    select_version,
    to_outputs,
)


def _deploy_payload(*versions: dict) -> str:
    return json.dumps({"configs": [], "versions": list(versions)})


def _version(id_: str, project: str = "my-project", service: str = "default") -> dict:
    return {"id": id_, "project": project, "service": service, "traffic_split": None}


def test_single_version_is_selected(deploy_response: str) -> None:
    version = select_version(parse_deploy_response(deploy_response), project="some-other-project")

    assert (version.project, version.service, version.id) == ("my-project", "default", "20221215t102539")


def test_multiple_versions_filtered_by_service() -> None:
    response = parse_deploy_response(
        _deploy_payload(_version("v1", service="default"), _version("v1", service="worker"))
    )

    assert select_version(response, version_id="v1", service="worker").service == "worker"


def test_multiple_versions_ambiguous() -> None:
    response = parse_deploy_response(_deploy_payload(_version("v1"), _version("v2")))

    with pytest.raises(UnexpectedResponseError):
        select_version(response)


def test_empty_versions() -> None:
    with pytest.raises(UnexpectedResponseError):
        select_version(parse_deploy_response(_deploy_payload()))


@pytest.mark.parametrize(
    "stdout",
    [
        "not json",
        "",
        json.dumps({"versions": [{"id": "v1"}]}),
        json.dumps({"versions": "nope"}),
    ],
)
def test_malformed_deploy_response(stdout: str) -> None:
    with pytest.raises(UnexpectedResponseError):
        parse_deploy_response(stdout)


def test_describe_outputs(describe_response: str) -> None:
    outputs = to_outputs(parse_describe_response(describe_response))

    assert outputs.as_dict() == {
        "name": "apps/my-project/services/default/versions/20221215t102539",
        "runtime": "nodejs16",
        "service_account_email": "my-project@appspot.gserviceaccount.com",
        "serving_status": "SERVING",
        "version_id": "20221215t102539",
        "version_url": "https://20221215t102539-dot-my-project.appspot.com",
        "url": "https://20221215t102539-dot-my-project.appspot.com",
    }


def test_describe_optional_fields_default_to_empty() -> None:
    outputs = to_outputs(parse_describe_response(json.dumps({"name": "apps/p/services/s/versions/v", "id": "v"})))

    assert outputs.runtime == ""
    assert outputs.service_account_email == ""
    assert outputs.url == ""


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "v"},
        {"name": "apps/p/services/s/versions/v"},
        {"name": "", "id": "v"},
    ],
)
def test_describe_requires_name_and_id(payload: dict) -> None:
    with pytest.raises(UnexpectedResponseError):
        parse_describe_response(json.dumps(payload))
