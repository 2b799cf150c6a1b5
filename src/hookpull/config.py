"""Service configuration: listen address, queue, timeout and repositories."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from hookpull.sync.models import RepoEntry
from hookpull.sync.puller import DEFAULT_TIMEOUT
from hookpull.sync.queue import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)

DEFAULT_LISTEN = ":8080"
DEFAULT_HOOK_PATH = "/wh"
DEFAULT_CONFIG_PATH = Path("/etc/hookpull.yaml")

_JSON_SUFFIXES = frozenset({".json", ".conf"})
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class ConfigError(Exception):
    """The configuration file could not be read or is invalid."""


class HookConfig(BaseModel):
    """Configuration for the webhook service."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    listen: str = Field(default=DEFAULT_LISTEN, description="host:port to bind; empty host binds all")
    queue_size: int = Field(
        default=DEFAULT_CAPACITY,
        validation_alias=AliasChoices("queue_size", "buffer_size"),
        description="Dispatch queue capacity",
    )
    timeout: int = Field(default=DEFAULT_TIMEOUT, description="Per-pull timeout in seconds")
    hook_path: str = Field(default=DEFAULT_HOOK_PATH, description="URL path of the hook endpoint")
    repos: dict[str, RepoEntry] = Field(default_factory=dict)

    @field_validator("queue_size", "timeout", mode="before")
    @classmethod
    def unset_as_default(cls, v: Any, info: Any) -> Any:
        """Treat null and 0 as unset."""
        if v is None or v == 0:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("queue_size", "timeout")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            msg = f"must be a positive integer, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("repos", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("hook_path")
    @classmethod
    def absolute_path(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"

    @field_validator("listen")
    @classmethod
    def valid_listen(cls, v: str) -> str:
        _split_listen(v)
        return v

    @property
    def host(self) -> str | None:
        """Bind host; None binds every interface (IPv4 and IPv6)."""
        return _split_listen(self.listen)[0]

    @property
    def port(self) -> int:
        return _split_listen(self.listen)[1]


def _split_listen(listen: str) -> tuple[str | None, int]:
    host, sep, port = listen.strip().rpartition(":")
    if not sep:
        msg = f"listen address {listen!r} must be host:port or :port"
        raise ValueError(msg)
    try:
        port_num = int(port)
    except ValueError:
        msg = f"invalid port in listen address {listen!r}"
        raise ValueError(msg) from None
    if not 0 <= port_num <= 65535:
        msg = f"port out of range in listen address {listen!r}"
        raise ValueError(msg)
    return host.strip("[]") or None, port_num


def default_config() -> HookConfig:
    """Defaults: no repositories, listen on port 8080."""
    return HookConfig()


def _decode(path: Path, text: str) -> Any:
    suffix = path.suffix.lower()
    if suffix in _JSON_SUFFIXES:
        return json.loads(text)
    if suffix in _YAML_SUFFIXES:
        return yaml.safe_load(text)
    msg = f"unknown config file extension: {path.suffix or '(none)'}"
    raise ConfigError(msg)


def load_config(path: str | Path) -> HookConfig:
    """Load configuration, picking JSON or YAML by file extension.

    Raises:
        ConfigError: unreadable file, unknown extension, bad syntax or schema.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"failed to open config file {path}: {exc}"
        raise ConfigError(msg) from exc

    try:
        data = _decode(path, text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"failed to decode config file {path}: {exc}"
        raise ConfigError(msg) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"config file {path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)

    try:
        config = HookConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"invalid config file {path}: {exc}"
        raise ConfigError(msg) from exc

    logger.debug("Loaded config from %s (%d repos)", path, len(config.repos))
    return config
