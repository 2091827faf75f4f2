"""Data models for the Azure DevOps client."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

API_VERSION = "7.0"

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class AzureDevOpsConnection:
    """Code host connection config. Immutable once a client holds it."""

    url: str
    username: str
    token: str
    projects: tuple[str, ...] = field(default_factory=tuple)
    orgs: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ListRepositoriesByProjectOrOrgArgs:
    # "org/project" for projects, "org" for orgs
    project_or_org_name: str


class RepositoriesValue(BaseModel):
    """A repository as returned by the git repositories endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = ""
    name: str = ""
    api_url: str = Field(default="", alias="url")
    ssh_url: str = Field(default="", alias="sshUrl")
    web_url: str = Field(default="", alias="webUrl")
    is_disabled: bool = Field(default=False, alias="isDisabled")


class ListRepositoriesResponse(BaseModel):
    value: list[RepositoriesValue] = Field(default_factory=list)
    count: int = 0

    @field_validator("value", mode="before")
    @classmethod
    def _null_value_is_empty(cls, v):
        return [] if v is None else v


@dataclass
class Response(Generic[T]):
    """Result of one pipeline call: the decoded body plus what's left of the HTTP response."""

    status_code: int
    headers: httpx.Headers
    result: T
