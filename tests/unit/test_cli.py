"""Tests for the scm-gitlab command line."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import respx
from click.testing import CliRunner

from scm_gitlab import main

API_URL = "https://gitlab.com/api/v3"
FIXTURES = Path(__file__).parent.parent / "fixtures"


@pytest.fixture
def runner(monkeypatch) -> CliRunner:
    monkeypatch.setenv("GITLAB_OAUTH_CLIENT_ID", "myclientid")
    monkeypatch.setenv("GITLAB_OAUTH_CLIENT_SECRET", "myclientsecret")
    monkeypatch.setenv("GITLAB_TOKEN", "myAccessToken")
    return CliRunner()


def test_parse_url(runner):
    with respx.mock(base_url=API_URL) as router:
        router.get("/projects/batman%2Ftest").mock(
            return_value=httpx.Response(200, json={"id": 12345})
        )
        result = runner.invoke(main, ["parse-url", "git@gitlab.com:batman/test.git#dev"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"scmUri": "gitlab.com:12345:dev"}


def test_commit_sha_error(runner):
    with respx.mock(base_url=API_URL) as router:
        router.get("/projects/repoId/repository/branches/branchName").mock(
            return_value=httpx.Response(404, json={"message": "Resource not found"})
        )
        result = runner.invoke(main, ["commit-sha", "hostName:repoId:branchName"])
    assert result.exit_code == 1
    assert 'Caller "_getCommitSha"' in result.output


def test_get_file_prints_json(runner):
    with respx.mock(base_url=API_URL) as router:
        route = router.get("/projects/repoId/repository/files").mock(
            return_value=httpx.Response(
                200, json={"file_path": "screwdriver.yaml", "content": "am9iczoge30K"}
            )
        )
        result = runner.invoke(
            main, ["get-file", "hostName:repoId:branchName", "screwdriver.yaml"]
        )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"content": "am9iczoge30K"}
    assert route.calls.last.request.url.params["ref"] == "branchName"


def test_parse_hook(runner):
    payload = str(FIXTURES / "gitlab.push.json")
    result = runner.invoke(main, ["parse-hook", "--event", "Push Hook", payload])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["sha"] == "76506776e7931f843206c54586266468aec1a92e"


def test_parse_hook_unsupported(runner):
    payload = str(FIXTURES / "gitlab.push.json")
    result = runner.invoke(main, ["parse-hook", "--event", "Tag Push Hook", payload])
    assert result.exit_code == 0
    assert json.loads(result.output) is None


def test_checkout_command(runner):
    result = runner.invoke(
        main,
        [
            "checkout-command",
            "--host", "hostName",
            "--org", "orgName",
            "--repo", "repoName",
            "--branch", "branchName",
            "--sha", "shaValue",
        ],
    )
    assert result.exit_code == 0, result.output
    output = json.loads(result.output)
    assert set(output) == {"name", "command"}
    assert output["name"] == "sd-checkout-code"
    assert "git reset --hard shaValue" in output["command"]


def test_missing_client_id(runner, monkeypatch):
    monkeypatch.delenv("GITLAB_OAUTH_CLIENT_ID")
    result = runner.invoke(main, ["parse-url", "git@gitlab.com:batman/test.git"])
    assert result.exit_code == 2
    assert "oauthClientId" in result.output
