"""Records returned to the host orchestrator."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, computed_field

from .base import ScmModel


class RepoEvent(ScmModel):
    type: Literal["repo"] = "repo"
    action: Literal["push"] = "push"
    username: str
    checkout_url: str
    branch: str
    sha: str
    hook_id: None = None


class PullRequestEvent(ScmModel):
    type: Literal["pr"] = "pr"
    action: Literal["opened", "closed"]
    username: str
    checkout_url: str
    branch: str
    sha: str
    pr_num: int
    pr_ref: str
    hook_id: None = None


WebhookEvent = RepoEvent | PullRequestEvent


class DecoratedAuthor(ScmModel):
    url: str
    name: str
    username: str
    avatar: str


class DecoratedUrl(ScmModel):
    url: str
    name: str
    branch: str


class DecoratedCommit(ScmModel):
    url: str
    message: str
    author: DecoratedAuthor


class OpenedPr(ScmModel):
    name: str
    ref: str


class BellUriConfig(ScmModel):
    uri: str


class BellConfiguration(ScmModel):
    client_id: str
    client_secret: str
    config: BellUriConfig
    force_https: bool
    is_secure: bool
    provider: Literal["gitlab"] = "gitlab"


class CheckoutCommand(ScmModel):
    """Shell steps that clone a repository and position it at the build commit."""

    name: str = "sd-checkout-code"
    commands: tuple[str, ...] = Field(exclude=True)

    @computed_field
    @property
    def command(self) -> str:
        return " && ".join(self.commands)
