"""Tests for payload normalization of both hook shapes."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from hookpull.sync.errors import MalformedPayload, RequestRejected
from hookpull.sync.models import Notification
from hookpull.sync.normalizer import parse_github_form, parse_gitlab_body

from conftest import github_payload, gitlab_body


class TestGithubForm:
    """Form-encoded shape: JSON document in the ``payload`` field."""

    def test_all_fields(self) -> None:
        """Every field of a complete payload is extracted."""
        result = parse_github_form(github_payload(repo="test-repo"))
        assert result == Notification(
            name="testuser",
            email="test@example.com",
            commit_id="abc123",
            message="test commit",
            repository="test-repo",
            secret="",
        )

    def test_secret_never_set(self) -> None:
        """The form shape carries no secret, even if the JSON has one."""
        raw = json.dumps({"repository": {"name": "demo"}, "secret": "ignored"})
        assert parse_github_form(raw).secret == ""

    def test_missing_sections_are_empty(self) -> None:
        """Absent sections become empty strings."""
        result = parse_github_form(json.dumps({"repository": {"name": "demo"}}))
        assert result.repository == "demo"
        assert result.name == ""
        assert result.commit_id == ""

    def test_null_head_commit(self) -> None:
        """A null head_commit is treated as empty."""
        raw = json.dumps({"head_commit": None, "repository": {"name": "demo"}})
        result = parse_github_form(raw)
        assert result.message == ""
        assert result.repository == "demo"

    @pytest.mark.parametrize("raw", ["", "not json", "[1, 2]", '{"repository": "x"}'])
    def test_malformed(self, raw: str) -> None:
        """Undecodable or wrongly shaped JSON raises MalformedPayload."""
        with pytest.raises(MalformedPayload):
            parse_github_form(raw)


class TestGitlabBody:
    """Raw JSON shape with token header."""

    def test_first_commit_used(self) -> None:
        """Author and message come from the first commit."""
        body = json.dumps(gitlab_body(repo="gitlab-repo")).encode()
        result = parse_gitlab_body(body, "gitlab-secret")
        assert result.name == "gitlabuser"
        assert result.email == "gitlab@example.com"
        assert result.commit_id == "def450"
        assert result.message == "gitlab commit 0"
        assert result.repository == "gitlab-repo"
        assert result.secret == "gitlab-secret"

    def test_multiple_commits_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        """More than one commit logs a warning with the count."""
        body = json.dumps(gitlab_body(commits=3)).encode()
        with caplog.at_level(logging.WARNING, logger="hookpull.sync.normalizer"):
            result = parse_gitlab_body(body)
        assert result.commit_id == "def450"
        assert "count: 3" in caplog.text

    def test_no_commits_is_malformed(self) -> None:
        """An empty commits list is rejected."""
        body = json.dumps(gitlab_body(commits=0)).encode()
        with pytest.raises(MalformedPayload, match="no commits"):
            parse_gitlab_body(body, "token")

    def test_missing_commits_key_is_malformed(self) -> None:
        """A body without commits is rejected."""
        with pytest.raises(MalformedPayload):
            parse_gitlab_body(b'{"project": {"name": "demo"}}')

    def test_empty_body_is_malformed(self) -> None:
        """An empty body is rejected."""
        with pytest.raises(MalformedPayload):
            parse_gitlab_body(b"")

    def test_malformed_is_request_rejected(self) -> None:
        """MalformedPayload is a RequestRejected."""
        with pytest.raises(RequestRejected):
            parse_gitlab_body(b"{")


class TestNotification:
    """Test the Notification model."""
    def test_frozen(self) -> None:
        """Notifications cannot be mutated."""
        notification = Notification(repository="demo")
        with pytest.raises(ValidationError):
            notification.repository = "other"  # type: ignore[misc]
