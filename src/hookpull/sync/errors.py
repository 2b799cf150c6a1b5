"""Exceptions raised while ingesting and applying push notifications."""

from __future__ import annotations


class HookError(Exception):
    """Base class for hookpull errors."""


class RequestRejected(HookError):
    """A notification was refused; the HTTP caller gets a generic client error."""


class MalformedPayload(RequestRejected):
    """The request body could not be decoded into a notification."""


class UnknownRepository(RequestRejected):
    """The notified repository has no registry entry."""

    def __init__(self, repository: str) -> None:
        self.repository = repository
        super().__init__(f"repository {repository!r} is not configured")


class InvalidSecret(RequestRejected):
    """The registry entry requires a secret and the presented one differs."""

    def __init__(self, repository: str) -> None:
        self.repository = repository
        super().__init__(f"secret for repository {repository!r} does not match")


class SyncFailure(HookError):
    """Updating one working copy failed (non-zero exit, I/O error, timeout)."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
