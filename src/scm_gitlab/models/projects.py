"""Project and project hook models."""

from __future__ import annotations

from .base import GitLabModel


class Project(GitLabModel):
    id: int | str
    name: str = ""
    path: str = ""
    path_with_namespace: str = ""
    default_branch: str | None = None
    web_url: str = ""
    ssh_url_to_repo: str = ""
    http_url_to_repo: str = ""


class ProjectHook(GitLabModel):
    id: int
    url: str
    push_events: bool = False
    merge_requests_events: bool = False
