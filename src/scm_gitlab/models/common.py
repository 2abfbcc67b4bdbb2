"""Common GitLab models shared across domains."""

from __future__ import annotations

from .base import GitLabModel


class User(GitLabModel):
    id: int | None = None
    username: str
    name: str = ""
    state: str = ""
    avatar_url: str | None = None
    web_url: str = ""
