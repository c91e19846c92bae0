"""
Branch Resolution

Finds the application row to fork from when the source is connected to git.

Each git branch of an application is stored as its own application row.
The id a client holds may point at a non-default branch (for example when
the repository's default branch was changed after the id was captured),
so forks always re-resolve against the current default branch unless the
caller asked for a specific branch.
"""

import logging

from forkflow.core.exceptions import NotFoundError
from forkflow.models.contracts.applications import Application
from forkflow.models.enums import AclPermission, EntityKind
from forkflow.services.forking.collaborators import ApplicationLookup

logger = logging.getLogger(__name__)


class BranchResolver:
    """Resolves the effective source application for a fork."""

    def __init__(
        self,
        applications: ApplicationLookup,
        read_permission: AclPermission = AclPermission.READ_APPLICATIONS,
    ):
        self.applications = applications
        self.read_permission = read_permission

    async def resolve(self, application_id: str, branch_name: str | None = None) -> Application:
        """
        Resolve the application to fork.

        Args:
            application_id: Id supplied by the caller (treated as the default
                application id when looking up branch variants)
            branch_name: Explicit branch to fork from; empty means "default branch"

        Returns:
            The application row to fork from

        Raises:
            NotFoundError: If the application or requested branch variant is not readable
        """
        if branch_name:
            return await self._find_branch(branch_name, application_id)

        application = await self.applications.find_by_id(application_id, self.read_permission)
        if application is None:
            raise NotFoundError(EntityKind.APPLICATION, application_id)

        metadata = application.git_application_metadata
        if metadata is None or metadata.is_on_default_branch:
            return application

        logger.info(
            f"Application {application_id} is on branch '{metadata.branch_name}', "
            f"forking from default branch '{metadata.default_branch_name}' instead",
            extra={"application_id": application_id, "branch_name": metadata.default_branch_name},
        )
        return await self._find_branch(metadata.default_branch_name, application_id)

    async def _find_branch(self, branch_name: str, default_application_id: str) -> Application:
        application = await self.applications.find_by_branch_and_default_id(
            branch_name, default_application_id, self.read_permission
        )
        if application is None:
            raise NotFoundError(EntityKind.APPLICATION, f"{default_application_id}, {branch_name}")
        return application
