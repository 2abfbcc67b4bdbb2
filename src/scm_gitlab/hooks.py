"""Normalization of inbound GitLab webhooks."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import pydantic

from .models.scm import PullRequestEvent, RepoEvent, WebhookEvent
from .models.webhooks import MergeRequestHook, PushHook

logger = logging.getLogger(__name__)

EVENT_HEADER = "x-gitlab-event"
MERGE_REQUEST_HOOK = "Merge Request Hook"
PUSH_HOOK = "Push Hook"

BRANCH_PREFIX = "refs/heads/"

# GitLab merge request action -> normalized action
_MR_ACTIONS = {
    "open": "opened",
    "close": "closed",
    "merge": "closed",
}


def _merge_request_event(body: Any) -> PullRequestEvent | None:
    hook = MergeRequestHook.model_validate(body)
    attrs = hook.object_attributes
    action = _MR_ACTIONS.get(attrs.action or "")
    if action is None:
        logger.info("Ignoring merge request action %r", attrs.action)
        return None

    return PullRequestEvent(
        action=action,
        username=hook.user.username,
        checkout_url=attrs.source.http_url,
        branch=attrs.target_branch,
        sha=attrs.last_commit.id,
        pr_num=attrs.iid,
        pr_ref=attrs.source_branch,
    )


def _push_event(body: Any) -> RepoEvent:
    hook = PushHook.model_validate(body)
    branch = hook.ref.removeprefix(BRANCH_PREFIX)
    sha = hook.checkout_sha or (hook.commits[-1].id if hook.commits else hook.after)

    return RepoEvent(
        username=hook.user_username,
        checkout_url=hook.repository.git_http_url,
        branch=branch,
        sha=sha,
    )


def parse_hook(headers: Mapping[str, str], body: Any) -> WebhookEvent | None:
    """Normalize a webhook request, or return ``None`` if it is not one we act on.

    Never raises: unknown events and payloads that do not match GitLab's
    schema both yield ``None``.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    event = lowered.get(EVENT_HEADER)

    try:
        if event == MERGE_REQUEST_HOOK:
            return _merge_request_event(body)
        if event == PUSH_HOOK:
            return _push_event(body)
    except pydantic.ValidationError as e:
        logger.info("Ignoring malformed %r payload: %d schema error(s)", event, e.error_count())
        return None

    logger.info("Ignoring unsupported webhook event %r", event)
    return None
