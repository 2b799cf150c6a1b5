"""Canonical records and wire models for push notifications."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Notification(BaseModel):
    """Immutable record of one push event, independent of the sending service."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    commit_id: str = ""
    message: str = ""
    repository: str = ""
    secret: str = ""


class RepoEntry(BaseModel):
    """A configured repository: optional shared secret and the paths to pull."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    secret: str = Field(default="", description="Shared secret; empty disables the check")
    paths: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("paths", "folders"),
        description="Working copies updated for this repository",
    )

    @field_validator("secret", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("paths", mode="before")
    @classmethod
    def none_as_no_paths(cls, v: Any) -> Any:
        return [] if v is None else v


# ---------------------------------------------------------------------------
# Wire models. Missing or null sub-objects decode to empty values.
# ---------------------------------------------------------------------------


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, v: Any, info: Any) -> Any:
        if v is not None:
            return v
        field = cls.model_fields[info.field_name]
        return field.get_default(call_default_factory=True)


class _Person(_Lenient):
    name: str = ""
    email: str = ""


class _Named(_Lenient):
    name: str = ""


class _HeadCommit(_Lenient):
    id: str = ""
    message: str = ""


class _Commit(_Lenient):
    id: str = ""
    message: str = ""
    author: _Person = Field(default_factory=_Person)


class GithubPushPayload(_Lenient):
    """The JSON document carried in the ``payload`` form field."""

    pusher: _Person = Field(default_factory=_Person)
    head_commit: _HeadCommit = Field(default_factory=_HeadCommit)
    repository: _Named = Field(default_factory=_Named)


class GitlabPushPayload(_Lenient):
    """A raw JSON push hook body."""

    project: _Named = Field(default_factory=_Named)
    commits: list[_Commit] = Field(default_factory=list)
