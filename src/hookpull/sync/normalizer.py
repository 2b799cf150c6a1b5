"""Decode hosting-service push hooks into a single Notification record.

Two wire shapes are accepted:

- form-encoded body whose ``payload`` field holds a JSON push document
  (``pusher``, ``head_commit``, ``repository``); carries no secret.
- raw JSON body (``project``, ``commits``) with the shared secret in the
  ``X-Gitlab-Token`` header. Only the first commit is used.

The declared content type picks the decoder; nothing else is sniffed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from hookpull.sync.errors import MalformedPayload
from hookpull.sync.models import GithubPushPayload, GitlabPushPayload, Notification

if TYPE_CHECKING:
    from aiohttp import web

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
TOKEN_HEADER = "X-Gitlab-Token"
PAYLOAD_FIELD = "payload"


def parse_github_form(raw_payload: str) -> Notification:
    """Build a Notification from the JSON text of a ``payload`` form field."""
    try:
        pl = GithubPushPayload.model_validate_json(raw_payload)
    except ValidationError as exc:
        msg = f"invalid form payload: {exc.error_count()} error(s)"
        raise MalformedPayload(msg) from exc

    return Notification(
        name=pl.pusher.name,
        email=pl.pusher.email,
        commit_id=pl.head_commit.id,
        message=pl.head_commit.message,
        repository=pl.repository.name,
    )


def parse_gitlab_body(body: bytes, token: str = "") -> Notification:
    """Build a Notification from a raw JSON body and its token header."""
    try:
        pl = GitlabPushPayload.model_validate_json(body)
    except ValidationError as exc:
        msg = f"invalid JSON payload: {exc.error_count()} error(s)"
        raise MalformedPayload(msg) from exc

    if not pl.commits:
        msg = f"no commits in push for project {pl.project.name!r}"
        raise MalformedPayload(msg)

    if len(pl.commits) > 1:
        logger.warning("Multiple commits in one hook (count: %d), using the first", len(pl.commits))

    commit = pl.commits[0]
    return Notification(
        name=commit.author.name,
        email=commit.author.email,
        commit_id=commit.id,
        message=commit.message,
        repository=pl.project.name,
        secret=token,
    )


async def normalize(request: web.Request) -> Notification:
    """Decode an inbound hook request, choosing the shape by content type."""
    content_type = request.content_type
    logger.debug("Content-Type: %s", content_type)

    if content_type == JSON_CONTENT_TYPE:
        try:
            body = await request.read()
        except OSError as exc:
            msg = "failed to read request body"
            raise MalformedPayload(msg) from exc
        return parse_gitlab_body(body, request.headers.get(TOKEN_HEADER, ""))

    try:
        form = await request.post()
    except ValueError as exc:
        msg = "failed to parse form body"
        raise MalformedPayload(msg) from exc

    raw = form.get(PAYLOAD_FIELD)
    if raw is None:
        raw = request.query.get(PAYLOAD_FIELD, "")
    if not isinstance(raw, str):
        msg = f"{PAYLOAD_FIELD!r} field must be text, not a file upload"
        raise MalformedPayload(msg)
    return parse_github_form(raw)
