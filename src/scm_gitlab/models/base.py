"""Base models for GitLab API payloads and host-facing records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class GitLabModel(BaseModel):
    """Base model with common behavior for all GitLab API models."""

    model_config = {"extra": "ignore", "populate_by_name": True}


class ScmModel(BaseModel):
    """Base model for records handed back to the host, serialized in camelCase."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
