"""GitLab SCM adapter built on the GitLab REST API v3."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx
import pydantic

from .checkout import build_checkout_command
from .config import GitLabScmConfig
from .exceptions import FormatError, ResponseError
from .hooks import parse_hook
from .identifier import ScmUri
from .models.common import User
from .models.merge_requests import MergeRequest
from .models.projects import Project, ProjectHook
from .models.repositories import Branch, Commit, RepositoryFile
from .models.scm import (
    BellConfiguration,
    BellUriConfig,
    CheckoutCommand,
    DecoratedAuthor,
    DecoratedCommit,
    DecoratedUrl,
    OpenedPr,
    WebhookEvent,
)
from .status import BuildStatus, commit_state, status_context
from .transport import Request, Transport, TransportStats
from .urls import parse_checkout_url

logger = logging.getLogger(__name__)

HOOKS_PER_PAGE = 100


def _reason(resp: httpx.Response) -> str:
    """Pull GitLab's error message out of a response, falling back to the raw text."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and "message" in body:
        message = body["message"]
        return message if isinstance(message, str) else json.dumps(message)
    return resp.text or resp.reason_phrase


def _parse(schema: Any, data: Any, caller: str) -> Any:
    try:
        return pydantic.TypeAdapter(schema).validate_python(data)
    except pydantic.ValidationError as e:
        msg = f"Unexpected response shape from GitLab in {caller}: {e.error_count()} error(s)"
        raise FormatError(msg) from e


def _decorate_user(user: User) -> DecoratedAuthor:
    return DecoratedAuthor(
        url=user.web_url,
        name=user.name,
        username=user.username,
        avatar=user.avatar_url or "",
    )


class GitLabScm:
    """Source-control adapter that lets a CI/CD orchestrator drive a GitLab instance."""

    def __init__(self, config: GitLabScmConfig | Mapping[str, Any] | None = None) -> None:
        if config is None:
            config = GitLabScmConfig()
        elif not isinstance(config, GitLabScmConfig):
            config = GitLabScmConfig.from_mapping(config)
        config.validate()
        self.config = config
        self._transport = Transport(config.api_url, config.fusebox)

    async def close(self) -> None:
        await self._transport.close()

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _encode_id(project_id: str | int) -> str:
        return quote(str(project_id), safe="")

    async def _call(
        self,
        request: Request,
        caller: str,
        *,
        accept: tuple[int, ...] = (200,),
    ) -> httpx.Response:
        """Send *request*; any status outside *accept* becomes a ResponseError tagged *caller*."""
        resp = await self._transport.send(request)
        if resp.status_code not in accept:
            raise ResponseError(resp.status_code, _reason(resp), caller)
        return resp

    async def _get(
        self,
        path: str,
        token: str,
        caller: str,
        schema: Any,
        params: dict[str, Any] | None = None,
    ) -> Any:
        resp = await self._call(Request("GET", path, token, params=params), caller)
        try:
            body = resp.json()
        except ValueError as e:
            msg = f"GitLab returned a non-JSON body in {caller}"
            raise FormatError(msg) from e
        return _parse(schema, body, caller)

    async def _lookup_project(self, scm_uri: ScmUri, token: str) -> Project:
        path = f"/projects/{self._encode_id(scm_uri.project_id)}"
        return await self._get(path, token, "lookupScmUri", Project)

    # ── Repository identity ───────────────────────────────────────

    async def parse_url(self, *, checkout_url: str, token: str) -> str:
        """Resolve a checkout URL (``...#branch``) into a ``host:projectId:branch`` identifier."""
        parsed = parse_checkout_url(checkout_url)
        project = await self._get(f"/projects/{parsed.project_path}", token, "_parseUrl", Project)
        return ScmUri(parsed.host, str(project.id), parsed.branch).encode()

    @staticmethod
    async def parse_hook(headers: Mapping[str, str], body: Any) -> WebhookEvent | None:
        return parse_hook(headers, body)

    # ── Decoration ────────────────────────────────────────────────

    async def decorate_author(self, *, username: str, token: str) -> DecoratedAuthor:
        users = await self._get(
            "/users", token, "_decorateAuthor", list[User], params={"username": username}
        )
        if len(users) != 1:
            msg = f"Expected exactly one GitLab user named {username!r}, got {len(users)}"
            raise FormatError(msg)
        return _decorate_user(users[0])

    async def decorate_url(self, *, scm_uri: str, token: str) -> DecoratedUrl:
        uri = ScmUri.decode(scm_uri)
        project = await self._lookup_project(uri, token)
        name = project.path_with_namespace
        return DecoratedUrl(
            url=f"{self.config.gitlab_protocol}://{uri.host}/{name}/tree/{uri.branch}",
            name=name,
            branch=uri.branch,
        )

    async def decorate_commit(self, *, scm_uri: str, sha: str, token: str) -> DecoratedCommit:
        uri = ScmUri.decode(scm_uri)
        enc = self._encode_id(uri.project_id)
        commit = await self._get(
            f"/projects/{enc}/repository/commits/{sha}", token, "_decorateCommit", Commit
        )
        project = await self._lookup_project(uri, token)

        author = DecoratedAuthor(
            url="", name=commit.author_name, username=commit.author_name, avatar=""
        )
        if commit.author_email:
            users = await self._get(
                "/users",
                token,
                "_decorateCommit",
                list[User],
                params={"search": commit.author_email},
            )
            if len(users) == 1:
                author = _decorate_user(users[0])

        return DecoratedCommit(
            url=(
                f"{self.config.gitlab_protocol}://{uri.host}"
                f"/{project.path_with_namespace}/commit/{sha}"
            ),
            message=commit.message,
            author=author,
        )

    # ── Repository contents ───────────────────────────────────────

    async def get_commit_sha(self, *, scm_uri: str, token: str) -> str:
        uri = ScmUri.decode(scm_uri)
        enc = self._encode_id(uri.project_id)
        branch = quote(uri.branch, safe="")
        result = await self._get(
            f"/projects/{enc}/repository/branches/{branch}", token, "_getCommitSha", Branch
        )
        return result.commit.id

    async def get_file(
        self, *, scm_uri: str, token: str, path: str, ref: str | None = None
    ) -> str:
        """Return the file's ``content`` exactly as GitLab sends it.

        GitLab base64-encodes content and says so in ``encoding``; the value is
        passed through undecoded.
        """
        uri = ScmUri.decode(scm_uri)
        enc = self._encode_id(uri.project_id)
        result = await self._get(
            f"/projects/{enc}/repository/files",
            token,
            "_getFile",
            RepositoryFile,
            params={"file_path": path, "ref": ref or uri.branch},
        )
        return result.content

    async def get_opened_prs(self, *, scm_uri: str, token: str) -> list[OpenedPr]:
        uri = ScmUri.decode(scm_uri)
        enc = self._encode_id(uri.project_id)
        mrs = await self._get(
            f"/projects/{enc}/merge_requests",
            token,
            "_getOpenedPRs",
            list[MergeRequest],
            params={"state": "opened"},
        )
        return [OpenedPr(name=f"PR-{mr.iid}", ref=mr.source_branch) for mr in mrs]

    # ── Write operations ──────────────────────────────────────────

    async def update_commit_status(
        self,
        *,
        scm_uri: str,
        sha: str,
        build_status: BuildStatus | str,
        token: str,
        url: str,
        job_name: str | None = None,
    ) -> None:
        uri = ScmUri.decode(scm_uri)
        state, description = commit_state(build_status)
        params = {
            "context": status_context(job_name),
            "target_url": url,
            "state": state,
            "description": description,
        }
        enc = self._encode_id(uri.project_id)
        await self._call(
            Request("POST", f"/projects/{enc}/statuses/{sha}", token, params=params),
            "_updateCommitStatus",
            accept=(200, 201),
        )

    async def _find_webhook(self, enc: str, token: str, url: str) -> ProjectHook | None:
        page = 1
        while True:
            hooks = await self._get(
                f"/projects/{enc}/hooks",
                token,
                "_findWebhook",
                list[ProjectHook],
                params={"page": page, "per_page": HOOKS_PER_PAGE},
            )
            for hook in hooks:
                if hook.url == url:
                    return hook
            if len(hooks) < HOOKS_PER_PAGE:
                return None
            page += 1

    async def add_webhook(self, *, scm_uri: str, token: str, url: str) -> None:
        """Register *url* for push and merge request events, updating an existing hook in place."""
        uri = ScmUri.decode(scm_uri)
        enc = self._encode_id(uri.project_id)
        body = {"url": url, "push_events": True, "merge_requests_events": True}

        existing = await self._find_webhook(enc, token, url)
        if existing is not None:
            logger.info("Updating webhook %d on project %s", existing.id, uri.project_id)
            await self._call(
                Request("PUT", f"/projects/{enc}/hooks/{existing.id}", token, json=body),
                "_updateWebhook",
                accept=(200, 201),
            )
            return

        logger.info("Creating webhook on project %s", uri.project_id)
        await self._call(
            Request("POST", f"/projects/{enc}/hooks", token, json=body),
            "_createWebhook",
            accept=(200, 201),
        )

    # ── Static responses ──────────────────────────────────────────

    def get_checkout_command(
        self,
        *,
        host: str,
        org: str,
        repo: str,
        branch: str,
        sha: str,
        pr_ref: str | None = None,
    ) -> CheckoutCommand:
        return build_checkout_command(
            protocol=self.config.gitlab_protocol,
            host=host,
            org=org,
            repo=repo,
            branch=branch,
            sha=sha,
            username=self.config.username,
            email=self.config.email,
            pr_ref=pr_ref,
        )

    def get_bell_configuration(self) -> BellConfiguration:
        return BellConfiguration(
            client_id=self.config.oauth_client_id,
            client_secret=self.config.oauth_client_secret,
            config=BellUriConfig(uri=self.config.base_url),
            force_https=self.config.https,
            is_secure=self.config.https,
        )

    def stats(self) -> TransportStats:
        return self._transport.stats()
