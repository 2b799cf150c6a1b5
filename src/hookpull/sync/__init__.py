"""Push-hook ingestion, dispatch queue and path-serialized pull worker."""

from hookpull.sync.errors import (
    HookError,
    InvalidSecret,
    MalformedPayload,
    RequestRejected,
    SyncFailure,
    UnknownRepository,
)
from hookpull.sync.locks import PathLocks
from hookpull.sync.manager import Dispatcher
from hookpull.sync.models import Notification, RepoEntry
from hookpull.sync.normalizer import normalize, parse_github_form, parse_gitlab_body
from hookpull.sync.puller import GitPuller, PullResult, SyncOperation, UpdateWorker
from hookpull.sync.queue import DispatchQueue
from hookpull.sync.registry import RepoRegistry, authorize
from hookpull.sync.webhook import WebhookServer

__all__ = [
    "DispatchQueue",
    "Dispatcher",
    "GitPuller",
    "HookError",
    "InvalidSecret",
    "MalformedPayload",
    "Notification",
    "PathLocks",
    "PullResult",
    "RepoEntry",
    "RepoRegistry",
    "RequestRejected",
    "SyncFailure",
    "SyncOperation",
    "UnknownRepository",
    "UpdateWorker",
    "WebhookServer",
    "authorize",
    "normalize",
    "parse_github_form",
    "parse_gitlab_body",
]
