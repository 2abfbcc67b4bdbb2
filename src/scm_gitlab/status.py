"""Build status to GitLab commit status mapping."""

from __future__ import annotations

from enum import Enum

CONTEXT = "Screwdriver"


class BuildStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ABORTED = "ABORTED"
    RUNNING = "RUNNING"
    QUEUED = "QUEUED"


# state, description
_STATUS_MAP: dict[BuildStatus, tuple[str, str]] = {
    BuildStatus.SUCCESS: ("success", "Everything looks good!"),
    BuildStatus.FAILURE: ("failure", "Did not work as expected."),
    BuildStatus.ABORTED: ("failure", "Aborted mid-flight"),
    BuildStatus.RUNNING: ("pending", "Testing your code..."),
    BuildStatus.QUEUED: ("pending", "Looking good so far!"),
}
_DEFAULT = ("pending", "Build status unknown")


def commit_state(build_status: BuildStatus | str) -> tuple[str, str]:
    """Return GitLab's ``(state, description)`` for a build status.

    Unrecognised statuses report as pending.
    """
    try:
        return _STATUS_MAP[BuildStatus(build_status)]
    except ValueError:
        return _DEFAULT


def status_context(job_name: str | None = None) -> str:
    return f"{CONTEXT}/{job_name}" if job_name else CONTEXT
