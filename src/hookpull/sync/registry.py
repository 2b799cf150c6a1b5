"""Static repository registry and notification authorization."""

from __future__ import annotations

import hmac
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from hookpull.sync.errors import InvalidSecret, UnknownRepository

if TYPE_CHECKING:
    from collections.abc import Mapping

    from hookpull.sync.models import Notification, RepoEntry

logger = logging.getLogger(__name__)


class RepoRegistry:
    """Repository name -> RepoEntry mapping, fixed at startup.

    The registry is never mutated after construction, so it is shared
    between request handlers without locking.
    """

    def __init__(self, entries: Mapping[str, RepoEntry] | None = None) -> None:
        self._repos: Mapping[str, RepoEntry] = MappingProxyType(dict(entries or {}))

    def get(self, name: str) -> RepoEntry | None:
        """Get the entry for a repository name."""
        return self._repos.get(name)

    def names(self) -> list[str]:
        """List configured repository names."""
        return list(self._repos)

    def __contains__(self, name: object) -> bool:
        return name in self._repos

    def __len__(self) -> int:
        return len(self._repos)


def _secret_matches(expected: str, presented: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


def authorize(
    notification: Notification,
    registry: RepoRegistry,
    remote: str | None = None,
) -> list[str]:
    """Resolve a notification to the paths that should be pulled.

    Raises:
        UnknownRepository: the repository is not in the registry.
        InvalidSecret: the entry has a secret and the notification's differs.
    """
    entry = registry.get(notification.repository)
    if entry is None:
        raise UnknownRepository(notification.repository)

    if entry.secret and not _secret_matches(entry.secret, notification.secret):
        raise InvalidSecret(notification.repository)

    logger.info(
        "%s %s push by %s (%s)",
        remote or "-",
        notification.repository,
        notification.name,
        notification.email,
    )
    if notification.message:
        logger.info("%s commit message: %s", notification.commit_id, notification.message)

    return list(entry.paths)
