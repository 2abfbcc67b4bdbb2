"""Merge request models."""

from __future__ import annotations

from .base import GitLabModel


class MergeRequest(GitLabModel):
    id: int
    iid: int
    title: str = ""
    state: str = ""
    source_branch: str
    target_branch: str = ""
    sha: str = ""
