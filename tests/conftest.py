"""Shared test fixtures for hookpull."""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from typing import TYPE_CHECKING, Any

import pytest
from aiohttp.test_utils import TestClient, TestServer

from hookpull.config import HookConfig
from hookpull.sync.errors import SyncFailure
from hookpull.sync.webhook import WebhookServer

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from hookpull.sync.queue import DispatchQueue
    from hookpull.sync.registry import RepoRegistry


class RecordingSync:
    """Fake sync operation that records call order and per-path overlap."""

    def __init__(
        self,
        delay: float = 0.0,
        fail: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.delay = delay
        self.delays = delays or {}
        self.fail = fail or set()
        self.calls: list[str] = []
        self.active: dict[str, int] = defaultdict(int)
        self.max_active: dict[str, int] = defaultdict(int)
        self.max_total = 0

    async def __call__(self, path: str, timeout: float) -> None:
        self.calls.append(path)
        self.active[path] += 1
        self.max_active[path] = max(self.max_active[path], self.active[path])
        self.max_total = max(self.max_total, sum(self.active.values()))
        try:
            await asyncio.sleep(self.delays.get(path, self.delay))
            if path in self.fail:
                raise SyncFailure(path, "git pull exited with status 1")
        finally:
            self.active[path] -= 1


def github_payload(
    repo: str = "demo",
    name: str = "testuser",
    email: str = "test@example.com",
    commit_id: str = "abc123",
    message: str = "test commit",
) -> str:
    """JSON text for the ``payload`` form field."""
    return json.dumps({
        "pusher": {"name": name, "email": email},
        "head_commit": {"id": commit_id, "message": message},
        "repository": {"name": repo},
    })


def gitlab_body(repo: str = "demo", commits: int = 1) -> dict[str, Any]:
    """A JSON push body with ``commits`` commits."""
    return {
        "project": {"name": repo},
        "commits": [
            {
                "id": f"def45{i}",
                "message": f"gitlab commit {i}",
                "author": {"name": "gitlabuser", "email": "gitlab@example.com"},
            }
            for i in range(commits)
        ],
    }


@pytest.fixture
def recording_sync() -> RecordingSync:
    """A RecordingSync without delays or failures."""
    return RecordingSync()


@pytest.fixture
async def make_client() -> AsyncIterator[
    Callable[[RepoRegistry, DispatchQueue], Awaitable[TestClient]]
]:
    """Factory for test clients bound to a webhook app."""
    clients: list[TestClient] = []

    async def _make(
        registry: RepoRegistry,
        queue: DispatchQueue,
        config: HookConfig | None = None,
    ) -> TestClient:
        server = WebhookServer(config or HookConfig(), registry, queue)
        client = TestClient(TestServer(server.make_app()))
        await client.start_server()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.close()
