"""Compact ``host:projectId:branch`` repository identifiers."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import FormatError

DELIMITER = ":"


@dataclass(frozen=True)
class ScmUri:
    """A GitLab project and branch as the host system refers to them.

    ``host`` and ``branch`` must not contain ``:``; no escaping is applied, so
    such values do not survive a round trip through ``encode``/``decode``.
    """

    host: str
    project_id: str
    branch: str

    def encode(self) -> str:
        return DELIMITER.join((self.host, str(self.project_id), self.branch))

    def __str__(self) -> str:
        return self.encode()

    @classmethod
    def decode(cls, value: str) -> ScmUri:
        parts = value.split(DELIMITER)
        if len(parts) != 3:
            msg = f"Invalid scmUri {value!r}: expected host:projectId:branch"
            raise FormatError(msg)
        host, project_id, branch = parts
        return cls(host=host, project_id=project_id, branch=branch)
