"""Tests for adapter configuration."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from scm_gitlab.config import DEFAULT_EMAIL, DEFAULT_USERNAME, FuseboxConfig, GitLabScmConfig
from scm_gitlab.exceptions import ValidationError


def test_defaults():
    config = GitLabScmConfig(oauth_client_id="myclientid", oauth_client_secret="myclientsecret")
    assert config.gitlab_host == "gitlab.com"
    assert config.gitlab_protocol == "https"
    assert config.username == DEFAULT_USERNAME
    assert config.email == DEFAULT_EMAIL
    assert config.fusebox == FuseboxConfig()
    assert config.https is False


def test_api_url():
    config = GitLabScmConfig(
        oauth_client_id="a", oauth_client_secret="b", gitlab_host="git.example.com"
    )
    assert config.base_url == "https://git.example.com"
    assert config.api_url == "https://git.example.com/api/v3"


def test_from_mapping_camel_case():
    config = GitLabScmConfig.from_mapping(
        {
            "oauthClientId": "myclientid",
            "oauthClientSecret": "myclientsecret",
            "username": "abcd",
            "email": "dev-null@my.email.com",
        }
    )
    assert config == GitLabScmConfig(
        oauth_client_id="myclientid",
        oauth_client_secret="myclientsecret",
        gitlab_host="gitlab.com",
        gitlab_protocol="https",
        username="abcd",
        email="dev-null@my.email.com",
        fusebox=FuseboxConfig(),
        https=False,
    )


def test_from_mapping_nested_fusebox():
    config = GitLabScmConfig.from_mapping(
        {
            "oauthClientId": "a",
            "oauthClientSecret": "b",
            "fusebox": {"retry": {"minTimeout": 500, "retries": 2}, "breaker": {"maxFailures": 3}},
        }
    )
    assert config.fusebox.min_timeout == 0.5
    assert config.fusebox.retries == 2
    assert config.fusebox.max_failures == 3


def test_fusebox_mapping_durations_are_milliseconds():
    fusebox = FuseboxConfig.from_mapping(
        {
            "retry": {"minTimeout": 1, "maxTimeout": 2000},
            "breaker": {"timeout": 5000, "resetTimeout": 30000},
        }
    )
    assert fusebox.min_timeout == 0.001
    assert fusebox.max_timeout == 2.0
    assert fusebox.timeout == 5.0
    assert fusebox.reset_timeout == 30.0


def test_fusebox_direct_construction_stays_in_seconds():
    assert FuseboxConfig(min_timeout=1, timeout=5).timeout == 5


def test_fusebox_mapping_accepts_randomize():
    fusebox = FuseboxConfig.from_mapping({"retry": {"randomize": True, "factor": 3}})
    assert fusebox.randomize is True
    assert fusebox.factor == 3
    assert FuseboxConfig().randomize is False


def test_from_mapping_keeps_a_built_fusebox():
    fusebox = FuseboxConfig(retries=1)
    config = GitLabScmConfig.from_mapping(
        {"oauthClientId": "a", "oauthClientSecret": "b", "fusebox": fusebox}
    )
    assert config.fusebox is fusebox


def test_from_mapping_unknown_option():
    with pytest.raises(ValidationError, match="gitlab_port"):
        GitLabScmConfig.from_mapping({"oauthClientId": "a", "gitlabPort": 8080})


def test_from_mapping_unknown_fusebox_option():
    with pytest.raises(ValidationError, match="jitter"):
        FuseboxConfig.from_mapping({"retry": {"jitter": 1}})


def test_from_env():
    env = {
        "GITLAB_OAUTH_CLIENT_ID": "id",
        "GITLAB_OAUTH_CLIENT_SECRET": "secret",
        "GITLAB_HOST": "git.example.com/",
        "GITLAB_HTTPS": "true",
    }
    with patch.dict(os.environ, env, clear=False):
        config = GitLabScmConfig.from_env()
    assert config.oauth_client_id == "id"
    assert config.oauth_client_secret == "secret"
    assert config.gitlab_host == "git.example.com"
    assert config.https is True


def test_validate_missing_client_id():
    with pytest.raises(ValidationError, match="oauthClientId"):
        GitLabScmConfig(oauth_client_secret="b").validate()


def test_validate_missing_client_secret():
    with pytest.raises(ValidationError, match="oauthClientSecret"):
        GitLabScmConfig(oauth_client_id="a").validate()


def test_validate_protocol():
    config = GitLabScmConfig(oauth_client_id="a", oauth_client_secret="b", gitlab_protocol="ftp")
    with pytest.raises(ValidationError, match="gitlabProtocol"):
        config.validate()


def test_config_is_frozen():
    config = GitLabScmConfig(oauth_client_id="a", oauth_client_secret="b")
    with pytest.raises(AttributeError):
        config.gitlab_host = "elsewhere"
