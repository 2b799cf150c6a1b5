"""Command-line entry point for the webhook service."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys

from hookpull.config import DEFAULT_CONFIG_PATH, ConfigError, HookConfig, load_config
from hookpull.sync.manager import Dispatcher
from hookpull.sync.puller import GitPuller, UpdateWorker
from hookpull.sync.queue import DispatchQueue
from hookpull.sync.registry import RepoRegistry
from hookpull.sync.webhook import WebhookServer

logger = logging.getLogger("hookpull")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hookpull",
        description="Pull local git working copies when push webhooks arrive",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="Configuration file path (.yaml, .yml, .json or .conf)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


async def serve(config: HookConfig) -> None:
    """Run the webhook server and dispatcher until SIGINT/SIGTERM."""
    registry = RepoRegistry(config.repos)
    queue = DispatchQueue(config.queue_size)
    worker = UpdateWorker(GitPuller(), timeout=config.timeout)
    dispatcher = Dispatcher(queue, worker)
    server = WebhookServer(config, registry, queue)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    await dispatcher.start()
    await server.start()
    try:
        await stop.wait()
    finally:
        await server.stop()
        await dispatcher.stop()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        logger.error("Failed to load config: %s", exc)
        return 1

    logger.info("Webhook server, config: %s", args.config)
    logger.info(
        "%d repo(s), queue size: %d, timeout: %ds",
        len(config.repos),
        config.queue_size,
        config.timeout,
    )

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        logger.error("Failed to serve on %s: %s", config.listen, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
