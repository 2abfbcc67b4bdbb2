"""Inbound webhook payload models."""

from __future__ import annotations

from .base import GitLabModel


class HookUser(GitLabModel):
    name: str = ""
    username: str


class HookCommit(GitLabModel):
    id: str
    message: str = ""


class HookProject(GitLabModel):
    name: str = ""
    http_url: str = ""
    git_http_url: str = ""
    git_ssh_url: str = ""
    path_with_namespace: str = ""


class MergeRequestAttributes(GitLabModel):
    iid: int
    state: str = ""
    action: str | None = None
    source_branch: str
    target_branch: str
    source: HookProject
    last_commit: HookCommit


class MergeRequestHook(GitLabModel):
    object_kind: str = "merge_request"
    user: HookUser
    object_attributes: MergeRequestAttributes


class HookRepository(GitLabModel):
    name: str = ""
    url: str = ""
    homepage: str = ""
    git_http_url: str = ""
    git_ssh_url: str = ""


class PushHook(GitLabModel):
    object_kind: str = "push"
    ref: str
    before: str = ""
    after: str = ""
    checkout_sha: str | None = None
    user_name: str = ""
    user_username: str
    repository: HookRepository
    commits: list[HookCommit] = []
