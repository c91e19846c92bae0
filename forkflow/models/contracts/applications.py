"""
Application contract models for forking.

Pydantic models describing the entities the forking workflow reads
(applications, workspaces, users) and the shapes it returns.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from forkflow.models.enums import AclPermission

ANONYMOUS_USER_EMAIL = "anonymousUser"


# ==================== VERSION CONTROL ====================


class GitApplicationMetadata(BaseModel):
    """Branch linkage for an application connected to git.

    Either absent on an application or fully populated.
    """

    branch_name: str = Field(min_length=1, description="Branch this application row represents")
    default_branch_name: str = Field(min_length=1, description="Repository default branch")

    @property
    def is_on_default_branch(self) -> bool:
        return self.branch_name == self.default_branch_name


# ==================== ENTITIES ====================


class Application(BaseModel):
    """Application as seen by the requesting user."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255, description="Application display name")
    workspace_id: str = Field(min_length=1, description="Owning workspace")
    git_application_metadata: GitApplicationMetadata | None = None
    forking_enabled: bool = Field(
        default=False,
        description="Allows anyone with read access to fork (public templates and examples)",
    )
    user_permissions: set[AclPermission] = Field(
        default_factory=set,
        description="Permissions the requesting user holds on this application",
    )


class Workspace(BaseModel):
    """Workspace an application can be forked into."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(min_length=1)
    name: str = ""
    default_environment_id: str | None = None


class User(BaseModel):
    """Requesting user."""

    id: str | None = None
    email: str
    is_anonymous: bool = False

    @classmethod
    def anonymous(cls) -> "User":
        return cls(email=ANONYMOUS_USER_EMAIL, is_anonymous=True)


# ==================== REQUESTS / RESULTS ====================


class ForkRequest(BaseModel):
    """Input of a single fork, created per call."""

    model_config = ConfigDict(frozen=True)

    source_application_id: str = Field(min_length=1)
    target_workspace_id: str = Field(min_length=1)
    source_environment_id: str = Field(min_length=1)


class ApplicationImportResult(BaseModel):
    """Import-shaped projection of a forked application for clients."""

    application: Application
    is_partial_import: bool = False
    unconfigured_datasource_list: list[dict[str, Any]] = Field(default_factory=list)


@dataclass
class ForkOutcome:
    """Newly created application plus event data gathered while forking."""

    application: Application
    event_data: dict[str, Any] = field(default_factory=dict)
