"""Shell commands that check out the commit under build."""

from __future__ import annotations

from .models.scm import CheckoutCommand


def build_checkout_command(
    *,
    protocol: str,
    host: str,
    org: str,
    repo: str,
    branch: str,
    sha: str,
    username: str,
    email: str,
    pr_ref: str | None = None,
) -> CheckoutCommand:
    """Clone *branch*, reset to *sha*, and for a merge request merge *pr_ref* on top.

    For merge requests *branch* is the target branch and *sha* the head of the
    source branch, so the working tree is the would-be merge result.
    """
    checkout_url = f"{protocol}://{host}/{org}/{repo}"
    checkout_ref = branch if pr_ref else sha

    commands = [
        f"echo Cloning {checkout_url}, on branch {branch}",
        f"git clone --quiet --progress --branch {branch} {checkout_url} $SD_SOURCE_DIR",
        f"echo Reset to {checkout_ref}",
        f"git reset --hard {checkout_ref}",
        "echo Setting user name and user email",
        f"git config user.name {username}",
        f"git config user.email {email}",
    ]
    if pr_ref:
        commands += [
            f"echo Fetching PR and merging with {branch}",
            f"git fetch origin {pr_ref}",
            f"git merge {sha}",
        ]
    return CheckoutCommand(commands=tuple(commands))
