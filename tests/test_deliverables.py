from typing import List

import pytest

from appengine_deploy.deliverables import parse_deliverables, parse_flags


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", []),
        ("   \n , ", []),
        ("app.yaml", ["app.yaml"]),
        ("app.yaml foo.yaml", ["app.yaml", "foo.yaml"]),
        ("app.yaml, foo.yaml", ["app.yaml", "foo.yaml"]),
        ("app.yaml,foo.yaml,   bar.yaml", ["app.yaml", "foo.yaml", "bar.yaml"]),
        ("app.yaml,\nfoo.yaml,   bar.yaml", ["app.yaml", "foo.yaml", "bar.yaml"]),
        ("  dir/app-dev.yaml\n\n\tcron.yaml  ", ["dir/app-dev.yaml", "cron.yaml"]),
    ],
)
def test_parse_deliverables(raw: str, expected: List[str]) -> None:
    assert parse_deliverables(raw) == expected


def test_parse_deliverables_is_stable_when_rejoined() -> None:
    first = parse_deliverables("app.yaml,\nfoo.yaml,   bar.yaml")
    assert parse_deliverables(",".join(first)) == first


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", []),
        ("--log-http   --foo=bar", ["--log-http", "--foo", "bar"]),
        ("--no-cache\n--verbosity=debug", ["--no-cache", "--verbosity", "debug"]),
        ('--labels="team a"', ["--labels", "team a"]),
        ("--bucket 'gs://my bucket'", ["--bucket", "gs://my bucket"]),
    ],
)
def test_parse_flags(raw: str, expected: List[str]) -> None:
    assert parse_flags(raw) == expected
