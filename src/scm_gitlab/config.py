"""GitLab SCM adapter configuration."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from .exceptions import ValidationError

DEFAULT_USERNAME = "sd-buildbot"
DEFAULT_EMAIL = "dev-null@screwdriver.cd"

# Fusebox durations the host passes in milliseconds
_MILLISECOND_OPTIONS = ("min_timeout", "max_timeout", "timeout", "reset_timeout")

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _truthy(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class FuseboxConfig:
    """Retry and circuit-breaker tuning for outbound GitLab calls.

    Durations are in seconds. ``randomize`` multiplies each backoff delay by a
    random factor between 1 and 2.
    """

    retries: int = 5
    factor: float = 2.0
    min_timeout: float = 1.0
    max_timeout: float = 30.0
    randomize: bool = False
    timeout: float = 10.0
    max_failures: int = 5
    reset_timeout: float = 60.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | FuseboxConfig | None) -> FuseboxConfig:
        """Build from a flat or ``{"retry": {...}, "breaker": {...}}`` mapping.

        Keys may be camelCase (``minTimeout``) or snake_case (``min_timeout``).
        Durations in the mapping are milliseconds, as the host writes them.
        """
        if isinstance(data, FuseboxConfig):
            return data

        flat: dict[str, Any] = {}
        for key, value in (data or {}).items():
            if isinstance(value, Mapping):
                flat.update({_snake(k): v for k, v in value.items()})
            else:
                flat[_snake(key)] = value

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(flat) - known)
        if unknown:
            msg = f"Unknown fusebox option(s): {', '.join(unknown)}"
            raise ValidationError(msg)
        for name in _MILLISECOND_OPTIONS:
            if name in flat:
                flat[name] = flat[name] / 1000
        return cls(**flat)


@dataclass(frozen=True)
class GitLabScmConfig:
    """Configuration for the GitLab SCM adapter, fixed at construction time."""

    oauth_client_id: str = ""
    oauth_client_secret: str = ""
    gitlab_host: str = "gitlab.com"
    gitlab_protocol: str = "https"
    username: str = DEFAULT_USERNAME
    email: str = DEFAULT_EMAIL
    fusebox: FuseboxConfig = field(default_factory=FuseboxConfig)
    https: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GitLabScmConfig:
        """Build from the host's plugin options, e.g. ``{"oauthClientId": ...}``."""
        kwargs = {_snake(k): v for k, v in data.items()}
        kwargs["fusebox"] = FuseboxConfig.from_mapping(kwargs.get("fusebox"))

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            msg = f"Unknown configuration option(s): {', '.join(unknown)}"
            raise ValidationError(msg)
        return cls(**kwargs)

    @classmethod
    def from_env(cls) -> GitLabScmConfig:
        return cls(
            oauth_client_id=os.getenv("GITLAB_OAUTH_CLIENT_ID", ""),
            oauth_client_secret=os.getenv("GITLAB_OAUTH_CLIENT_SECRET", ""),
            gitlab_host=os.getenv("GITLAB_HOST", "gitlab.com").rstrip("/"),
            gitlab_protocol=os.getenv("GITLAB_PROTOCOL", "https"),
            username=os.getenv("SCM_USERNAME", DEFAULT_USERNAME),
            email=os.getenv("SCM_EMAIL", DEFAULT_EMAIL),
            https=_truthy(os.getenv("GITLAB_HTTPS", "false")),
        )

    @property
    def base_url(self) -> str:
        return f"{self.gitlab_protocol}://{self.gitlab_host}"

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api/v3"

    def validate(self) -> None:
        if not self.oauth_client_id:
            msg = "oauthClientId is required"
            raise ValidationError(msg)
        if not self.oauth_client_secret:
            msg = "oauthClientSecret is required"
            raise ValidationError(msg)
        if not self.gitlab_host:
            msg = "gitlabHost must not be empty"
            raise ValidationError(msg)
        if self.gitlab_protocol not in ("http", "https"):
            msg = f"gitlabProtocol must be http or https, got {self.gitlab_protocol!r}"
            raise ValidationError(msg)
