"""Checkout URL parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote

from .exceptions import FormatError

DEFAULT_BRANCH = "master"

# Matches:  git@<host>:<owner>/<repo>.git[#<branch>]
_SSH_RE = re.compile(
    r"^git@(?P<host>[^:/]+):(?P<owner>[^#]+)/(?P<repo>[^/#]+?)\.git(?:#(?P<branch>.+))?$"
)
# Matches:  http(s)://[<user>@]<host>/<owner>/<repo>.git[#<branch>]
_HTTPS_RE = re.compile(
    r"^https?://(?:[^@/]+@)?(?P<host>[^/]+)/(?P<owner>[^#]+)/(?P<repo>[^/#]+?)\.git(?:#(?P<branch>.+))?$"
)


@dataclass(frozen=True)
class CheckoutUrl:
    host: str
    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH

    @property
    def path_with_namespace(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def project_path(self) -> str:
        """The ``owner%2Frepo`` form GitLab accepts in place of a project id."""
        return quote(self.path_with_namespace, safe="")


def parse_checkout_url(value: str) -> CheckoutUrl:
    """Split an SSH or HTTPS checkout URL into host, owner, repo and branch.

    The SSH form is tried first. A missing ``#branch`` fragment means ``master``.
    """
    for pattern in (_SSH_RE, _HTTPS_RE):
        m = pattern.match(value)
        if m:
            return CheckoutUrl(
                host=m.group("host"),
                owner=m.group("owner"),
                repo=m.group("repo"),
                branch=m.group("branch") or DEFAULT_BRANCH,
            )
    msg = f"Invalid checkoutUrl {value!r}"
    raise FormatError(msg)
