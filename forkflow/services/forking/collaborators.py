"""
Forking Collaborators

Abstract contracts for the subsystems the forking workflow calls into.
Persistence, permission evaluation, git sync, and the deep-copy engine
live behind these interfaces; this package only sequences calls to them.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from forkflow.models.contracts.applications import (
    Application,
    ApplicationImportResult,
    User,
    Workspace,
)
from forkflow.models.enums import AclPermission, AnalyticsEvent


class ApplicationLookup(ABC):
    """Permission-aware application reads."""

    @abstractmethod
    async def find_by_id(self, application_id: str, permission: AclPermission) -> Application | None:
        """Return the application if it exists and the user holds ``permission`` on it."""
        ...

    @abstractmethod
    async def find_by_branch_and_default_id(
        self,
        branch_name: str,
        default_application_id: str,
        permission: AclPermission,
    ) -> Application | None:
        """Return the ``branch_name`` variant of a git-connected application."""
        ...

    @abstractmethod
    async def get_by_id(self, application_id: str) -> Application | None:
        """Return the application without any permission check."""
        ...


class WorkspaceLookup(ABC):
    """Permission-aware workspace reads."""

    @abstractmethod
    async def find_by_id(self, workspace_id: str, permission: AclPermission) -> Workspace | None:
        ...

    @abstractmethod
    async def get_default_environment_id(self, workspace_id: str) -> str:
        """Return the environment datasources resolve against by default."""
        ...


class SessionUserService(ABC):
    """Resolves the user behind the current request."""

    @abstractmethod
    async def get_current_user(self) -> User:
        """Return the requesting user, or the anonymous user."""
        ...


class ForkExecutor(ABC):
    """Deep-copies applications and everything they own."""

    @abstractmethod
    async def fork_applications(
        self,
        target_workspace_id: str,
        applications: Sequence[Application],
        source_environment_id: str,
    ) -> list[str]:
        """
        Copy ``applications`` into the target workspace.

        Returns:
            Ids of the newly created applications, in input order
        """
        ...


class AnalyticsEmitter(ABC):
    """Best-effort sink for analytics events."""

    @abstractmethod
    async def send_object_event(
        self,
        event: AnalyticsEvent,
        subject: Application,
        data: dict[str, Any],
    ) -> Application:
        ...


class ResultProjector(ABC):
    """Maps a forked application to the shape clients import."""

    @abstractmethod
    async def to_import_shape(
        self,
        new_application_id: str,
        workspace_id: str,
        application: Application,
    ) -> ApplicationImportResult:
        ...


def _default_analytics() -> AnalyticsEmitter:
    from forkflow.services.analytics import AuditLogAnalyticsEmitter

    return AuditLogAnalyticsEmitter()


@dataclass
class ForkingCollaborators:
    """
    Process-wide collaborators registered by the host application.

    The session user is request-bound and therefore resolved per request,
    not stored here.
    """

    applications: ApplicationLookup
    workspaces: WorkspaceLookup
    fork_executor: ForkExecutor
    result_projector: ResultProjector
    analytics: AnalyticsEmitter = field(default_factory=_default_analytics)
