"""Repository models: branches, commits, files."""

from __future__ import annotations

from .base import GitLabModel


class Commit(GitLabModel):
    id: str
    short_id: str = ""
    title: str = ""
    message: str = ""
    author_name: str = ""
    author_email: str = ""
    created_at: str = ""


class Branch(GitLabModel):
    name: str = ""
    protected: bool = False
    commit: Commit


class RepositoryFile(GitLabModel):
    file_name: str = ""
    file_path: str = ""
    size: int = 0
    encoding: str = ""
    content: str
    ref: str = ""
    blob_id: str = ""
    commit_id: str = ""
