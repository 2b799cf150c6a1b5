"""Webhook server receiving push notifications."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from aiohttp import web

from hookpull.sync.errors import RequestRejected
from hookpull.sync.normalizer import normalize
from hookpull.sync.registry import authorize

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from hookpull.config import HookConfig
    from hookpull.sync.queue import DispatchQueue
    from hookpull.sync.registry import RepoRegistry

logger = logging.getLogger(__name__)


def client_address(request: web.Request) -> str:
    """Best-effort client address, honouring reverse-proxy headers."""
    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        first = forwarded.split(",", 1)[0].strip()
        if first:
            return first
    return request.remote or "-"


@web.middleware
async def access_log_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Log one line per request with status and duration."""
    start = time.monotonic()
    remote = client_address(request)
    status = 500
    try:
        response = await handler(request)
        status = response.status
        return response
    except web.HTTPException as exc:
        status = exc.status
        if status == 404:
            logger.info("%s %s - Not Found", remote, request.path_qs)
        raise
    finally:
        logger.info(
            '%s "%s %s" %d %.1fms',
            remote,
            request.method,
            request.path_qs,
            status,
            (time.monotonic() - start) * 1000,
        )


class WebhookServer:
    """HTTP endpoint that authorizes push hooks and enqueues their paths.

    The response is sent as soon as the paths are queued; pulls happen
    later in the dispatcher. Every rejection gets the same 400 response so
    callers cannot discover which repositories are configured.
    """

    def __init__(
        self,
        config: HookConfig,
        registry: RepoRegistry,
        queue: DispatchQueue,
    ) -> None:
        """Initialize webhook server.

        Args:
            config: Service configuration (listen address, hook path).
            registry: Repositories accepted by the endpoint.
            queue: Dispatch queue receiving authorized path lists.
        """
        self._config = config
        self._registry = registry
        self._queue = queue
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    async def _handle_hook(self, request: web.Request) -> web.Response:
        """Handle one push hook."""
        remote = client_address(request)
        logger.debug("Request from %s", remote)

        try:
            notification = await normalize(request)
            paths = authorize(notification, self._registry, remote)
        except RequestRejected as exc:
            logger.warning("[%s] Bad request: %s", remote, exc)
            return web.Response(text="Bad Request", status=400)

        if self._queue.full():
            logger.warning("Dispatch queue full (%d), waiting for a free slot", self._queue.capacity)
        await self._queue.put(paths)
        return web.Response(text="OK", status=200)

    def make_app(self) -> web.Application:
        """Build the aiohttp application."""
        app = web.Application(middlewares=[access_log_middleware])
        app.router.add_post(self._config.hook_path, self._handle_hook)
        return app

    async def start(self) -> None:
        """Start the webhook server."""
        self._app = self.make_app()
        self._runner = web.AppRunner(self._app, access_log=None)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await self._site.start()

        logger.info(
            "Webhook server listening on %s:%d%s",
            self._config.host or "*",
            self._config.port,
            self._config.hook_path,
        )

    async def stop(self) -> None:
        """Stop the webhook server."""
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        self._site = None
        self._runner = None

        logger.info("Webhook server stopped")
