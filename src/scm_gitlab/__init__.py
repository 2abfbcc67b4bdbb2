"""GitLab source-control adapter for CI/CD orchestrators."""

import asyncio
import dataclasses
import json
import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from .checkout import build_checkout_command
from .client import GitLabScm
from .config import FuseboxConfig, GitLabScmConfig
from .exceptions import (
    CircuitOpenError,
    FormatError,
    GitLabScmError,
    ResponseError,
    ValidationError,
)
from .hooks import parse_hook
from .identifier import ScmUri
from .status import BuildStatus

__all__ = [
    "BuildStatus",
    "CircuitOpenError",
    "FormatError",
    "FuseboxConfig",
    "GitLabScm",
    "GitLabScmConfig",
    "GitLabScmError",
    "ResponseError",
    "ScmUri",
    "ValidationError",
    "main",
]


def _echo(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _run(ctx: click.Context, operation):
    """Run ``operation(scm)`` against a fresh adapter and release it afterwards."""

    async def runner():
        scm = GitLabScm(ctx.obj["config"])
        try:
            return await operation(scm)
        finally:
            await scm.close()

    try:
        return asyncio.run(runner())
    except GitLabScmError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--gitlab-host", envvar="GITLAB_HOST", help="GitLab host, e.g. gitlab.com")
@click.option(
    "--gitlab-protocol",
    envvar="GITLAB_PROTOCOL",
    type=click.Choice(["http", "https"]),
    help="Protocol used to reach GitLab",
)
@click.option("--client-id", envvar="GITLAB_OAUTH_CLIENT_ID", help="OAuth application id")
@click.option(
    "--client-secret", envvar="GITLAB_OAUTH_CLIENT_SECRET", help="OAuth application secret"
)
@click.option("--token", envvar="GITLAB_TOKEN", default="", help="GitLab access token")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
@click.pass_context
def main(
    ctx: click.Context,
    gitlab_host: str | None,
    gitlab_protocol: str | None,
    client_id: str | None,
    client_secret: str | None,
    token: str,
    log_level: str,
) -> None:
    """Run GitLab SCM adapter operations from the command line."""
    load_dotenv()
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    overrides = {
        "gitlab_host": gitlab_host,
        "gitlab_protocol": gitlab_protocol,
        "oauth_client_id": client_id,
        "oauth_client_secret": client_secret,
    }
    config = dataclasses.replace(
        GitLabScmConfig.from_env(), **{k: v for k, v in overrides.items() if v}
    )
    try:
        config.validate()
    except ValidationError as e:
        raise click.UsageError(str(e)) from e

    ctx.obj = {"config": config, "token": token}


@main.command("parse-url")
@click.argument("checkout_url")
@click.pass_context
def parse_url_cmd(ctx: click.Context, checkout_url: str) -> None:
    """Resolve CHECKOUT_URL into a host:projectId:branch identifier."""
    scm_uri = _run(
        ctx, lambda scm: scm.parse_url(checkout_url=checkout_url, token=ctx.obj["token"])
    )
    _echo({"scmUri": scm_uri})


@main.command("parse-hook")
@click.option("--event", required=True, help="Value of the X-Gitlab-Event header")
@click.argument("payload", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def parse_hook_cmd(ctx: click.Context, event: str, payload: Path) -> None:
    """Normalize the webhook body stored in PAYLOAD."""
    body = json.loads(payload.read_text(encoding="utf-8"))
    result = parse_hook({"x-gitlab-event": event}, body)
    _echo(result.to_dict() if result is not None else None)


@main.command("commit-sha")
@click.argument("scm_uri")
@click.pass_context
def commit_sha_cmd(ctx: click.Context, scm_uri: str) -> None:
    """Print the head commit of the branch named in SCM_URI."""
    sha = _run(ctx, lambda scm: scm.get_commit_sha(scm_uri=scm_uri, token=ctx.obj["token"]))
    _echo({"sha": sha})


@main.command("get-file")
@click.argument("scm_uri")
@click.argument("path")
@click.option("--ref", default=None, help="Branch, tag or commit (defaults to the SCM_URI branch)")
@click.pass_context
def get_file_cmd(ctx: click.Context, scm_uri: str, path: str, ref: str | None) -> None:
    """Print the contents of PATH as GitLab returns them."""
    content = _run(
        ctx,
        lambda scm: scm.get_file(scm_uri=scm_uri, token=ctx.obj["token"], path=path, ref=ref),
    )
    _echo({"content": content})


@main.command("checkout-command")
@click.option("--host", required=True)
@click.option("--org", required=True)
@click.option("--repo", required=True)
@click.option("--branch", required=True)
@click.option("--sha", required=True)
@click.option("--pr-ref", default=None)
@click.pass_context
def checkout_command_cmd(
    ctx: click.Context,
    host: str,
    org: str,
    repo: str,
    branch: str,
    sha: str,
    pr_ref: str | None,
) -> None:
    """Print the shell steps that check out SHA."""
    config = ctx.obj["config"]
    result = build_checkout_command(
        protocol=config.gitlab_protocol,
        host=host,
        org=org,
        repo=repo,
        branch=branch,
        sha=sha,
        username=config.username,
        email=config.email,
        pr_ref=pr_ref,
    )
    _echo(result.to_dict())


if __name__ == "__main__":
    main()
