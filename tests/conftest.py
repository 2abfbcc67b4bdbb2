"""Shared test fixtures for scm-gitlab."""

from __future__ import annotations

import pytest
import respx

from scm_gitlab.client import GitLabScm
from scm_gitlab.config import FuseboxConfig, GitLabScmConfig

API_URL = "https://gitlab.com/api/v3"


@pytest.fixture
def config() -> GitLabScmConfig:
    return GitLabScmConfig(
        oauth_client_id="myclientid",
        oauth_client_secret="myclientsecret",
        fusebox=FuseboxConfig(retries=1, min_timeout=0.001),
    )


@pytest.fixture
async def scm(config: GitLabScmConfig) -> GitLabScm:
    adapter = GitLabScm(config)
    yield adapter
    await adapter.close()


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(base_url=API_URL) as router:
        yield router
