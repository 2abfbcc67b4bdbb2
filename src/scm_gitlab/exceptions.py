"""GitLab SCM adapter exceptions."""

from __future__ import annotations


class GitLabScmError(Exception):
    """Base exception for GitLab SCM operations."""


class ValidationError(GitLabScmError):
    """Raised when the adapter configuration is invalid."""


class FormatError(GitLabScmError):
    """Raised when a checkout URL, SCM URI or response body cannot be parsed."""


class ResponseError(GitLabScmError):
    """Raised when GitLab answers with a status the calling operation does not accept."""

    def __init__(self, status_code: int, reason: str, caller: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.caller = caller
        super().__init__(f'{status_code} Reason "{reason}" Caller "{caller}"')


class CircuitOpenError(GitLabScmError):
    """Raised when the transport breaker is open and calls are being rejected."""

    def __init__(self) -> None:
        super().__init__("Circuit breaker is open; GitLab calls are suspended")
