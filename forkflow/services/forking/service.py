"""
Application Forking Service

Forks an application (pages, actions, datasource bindings) into a target
workspace on behalf of the requesting user.

Workflow (fork_to_workspace_with_environment):
1. Fetch source application, target workspace, and current user concurrently
   (first failure aborts the others)
2. Drop git linkage from the in-memory source copy
3. Check the user may fork the application
4. Delegate the deep copy to the ForkExecutor
5. Load the new application and send a best-effort analytics event

The whole workflow runs as a detached task. Forking is slow (create the
application, clone every page, then every action and collection) and the
client may give up before it finishes; stopping midway would leave a
half-copied application behind. Cancelling the caller's await only stops
the wait: the fork runs to completion and is visible on the next refresh.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

from forkflow.core.background import run_detached
from forkflow.core.exceptions import (
    ForkExecutionError,
    ForkingError,
    ForkingNotAllowedError,
    NotFoundError,
)
from forkflow.models.contracts.applications import (
    Application,
    ApplicationImportResult,
    ForkOutcome,
    ForkRequest,
    User,
    Workspace,
)
from forkflow.models.enums import AclPermission, AnalyticsEvent, EntityKind
from forkflow.services.forking.authorizer import ForkAuthorizer
from forkflow.services.forking.branch_resolver import BranchResolver
from forkflow.services.forking.collaborators import (
    AnalyticsEmitter,
    ApplicationLookup,
    ForkExecutor,
    ForkingCollaborators,
    ResultProjector,
    SessionUserService,
    WorkspaceLookup,
)

logger = logging.getLogger(__name__)

READ_PERMISSION = AclPermission.READ_APPLICATIONS
WORKSPACE_CREATE_PERMISSION = AclPermission.WORKSPACE_MANAGE_APPLICATIONS

# Analytics payload keys
EVENT_DATA = "eventData"
WORKSPACE = "workspace"


async def _gather_fail_fast(*aws: Awaitable[Any]) -> list[Any]:
    """
    Run awaitables concurrently and return their results in order.

    Raises the first error as soon as it happens; the remaining
    awaitables are cancelled. When several have failed by then, the one
    that finished earliest wins.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    finished: list[asyncio.Future[Any]] = []
    for task in tasks:
        task.add_done_callback(finished.append)

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    errors = [task.exception() for task in finished if task in done and not task.cancelled()]
    for error in errors:
        if error is not None:
            raise error

    return [task.result() for task in tasks]


class ApplicationForkingService:
    """
    Orchestrates application forks.

    One instance serves one request: the session user service is bound to
    the request that created it.
    """

    def __init__(
        self,
        applications: ApplicationLookup,
        workspaces: WorkspaceLookup,
        session_users: SessionUserService,
        fork_executor: ForkExecutor,
        analytics: AnalyticsEmitter,
        result_projector: ResultProjector,
        authorizer: ForkAuthorizer | None = None,
    ):
        self.applications = applications
        self.workspaces = workspaces
        self.session_users = session_users
        self.fork_executor = fork_executor
        self.analytics = analytics
        self.result_projector = result_projector
        self.authorizer = authorizer or ForkAuthorizer()
        self.branch_resolver = BranchResolver(applications, READ_PERMISSION)

    @classmethod
    def from_collaborators(
        cls,
        collaborators: ForkingCollaborators,
        session_users: SessionUserService,
    ) -> "ApplicationForkingService":
        return cls(
            applications=collaborators.applications,
            workspaces=collaborators.workspaces,
            session_users=session_users,
            fork_executor=collaborators.fork_executor,
            analytics=collaborators.analytics,
            result_projector=collaborators.result_projector,
        )

    # =========================================================================
    # Public operations
    # =========================================================================

    async def fork_to_workspace_with_environment(
        self,
        source_application_id: str,
        target_workspace_id: str,
        source_environment_id: str,
    ) -> Application:
        """
        Fork an application into a workspace, resolving datasources against
        ``source_environment_id``.

        The fork keeps running if the awaiting caller is cancelled.

        Returns:
            The newly created application

        Raises:
            pydantic.ValidationError: If any id is empty (nothing is started)
            NotFoundError: Source application or target workspace not accessible
            ForkingNotAllowedError: User may not fork the application
            ForkExecutionError: The deep copy failed
        """
        request = ForkRequest(
            source_application_id=source_application_id,
            target_workspace_id=target_workspace_id,
            source_environment_id=source_environment_id,
        )
        waiter = run_detached(
            self._fork(request),
            name=f"fork-{source_application_id}-to-{target_workspace_id}",
        )
        return await waiter

    async def fork_to_workspace(
        self,
        source_application_id: str,
        target_workspace_id: str,
        branch_name: str | None = None,
    ) -> ApplicationImportResult:
        """
        Fork an application, resolving the git branch and environment first.

        Without ``branch_name`` the fork is taken from the repository's current
        default branch. Datasources resolve against the default environment of
        the source application's workspace.
        """
        source = await self.branch_resolver.resolve(source_application_id, branch_name)
        source_environment_id = await self.workspaces.get_default_environment_id(source.workspace_id)

        forked = await self.fork_to_workspace_with_environment(
            source.id, target_workspace_id, source_environment_id
        )
        return await self.result_projector.to_import_shape(forked.id, forked.workspace_id, forked)

    # =========================================================================
    # Workflow
    # =========================================================================

    async def _fork(self, request: ForkRequest) -> Application:
        logger.info(
            f"Forking application {request.source_application_id} "
            f"into workspace {request.target_workspace_id}",
            extra={
                "source_application_id": request.source_application_id,
                "target_workspace_id": request.target_workspace_id,
                "source_environment_id": request.source_environment_id,
            },
        )

        application, workspace, user = await _gather_fail_fast(
            self._get_source_application(request.source_application_id),
            self._get_target_workspace(request.target_workspace_id),
            self.session_users.get_current_user(),
        )

        event_data: dict[str, Any] = {WORKSPACE: workspace}

        # Git linkage never carries over to the fork
        application = application.model_copy(update={"git_application_metadata": None})

        self._ensure_fork_allowed(user, application)

        new_application_ids = await self._copy_application(
            workspace, application, request.source_environment_id
        )
        new_application_id = new_application_ids[0]

        forked = await self.applications.get_by_id(new_application_id)
        if forked is None:
            raise NotFoundError(EntityKind.APPLICATION, new_application_id)

        outcome = ForkOutcome(application=forked, event_data=event_data)
        await self._send_fork_analytics_event(request, outcome)

        logger.info(
            f"Forked application {request.source_application_id} as {forked.id}",
            extra={
                "source_application_id": request.source_application_id,
                "new_application_id": forked.id,
                "target_workspace_id": request.target_workspace_id,
            },
        )
        return outcome.application

    async def _get_source_application(self, application_id: str) -> Application:
        application = await self.applications.find_by_id(application_id, READ_PERMISSION)
        if application is None:
            raise NotFoundError(EntityKind.APPLICATION, application_id)
        return application

    async def _get_target_workspace(self, workspace_id: str) -> Workspace:
        workspace = await self.workspaces.find_by_id(workspace_id, WORKSPACE_CREATE_PERMISSION)
        if workspace is None:
            raise NotFoundError(EntityKind.WORKSPACE, workspace_id)
        return workspace

    def _ensure_fork_allowed(self, user: User, application: Application) -> None:
        if not self.authorizer.allow_fork(user, application):
            logger.info(
                f"User {user.email} is not allowed to fork application {application.id}",
                extra={"application_id": application.id, "is_anonymous": user.is_anonymous},
            )
            raise ForkingNotAllowedError()

    async def _copy_application(
        self,
        workspace: Workspace,
        application: Application,
        source_environment_id: str,
    ) -> list[str]:
        try:
            new_application_ids = await self.fork_executor.fork_applications(
                workspace.id, [application], source_environment_id
            )
        except ForkingError:
            raise
        except Exception as e:
            logger.error(
                f"Copying application {application.id} into workspace {workspace.id} failed: {e}",
                exc_info=True,
            )
            raise ForkExecutionError() from e

        if not new_application_ids:
            raise ForkExecutionError(f"Copying application {application.id} created no application")
        return new_application_ids

    async def _send_fork_analytics_event(self, request: ForkRequest, outcome: ForkOutcome) -> None:
        """Record the fork. Failures are logged and never reach the caller."""
        try:
            source = await self.applications.find_by_id(request.source_application_id, READ_PERMISSION)
            if source is None:
                logger.warning(
                    f"Source application {request.source_application_id} no longer readable, "
                    "skipping fork analytics event"
                )
                return

            data = {
                "forkedFromAppId": request.source_application_id,
                "forkedToOrgId": request.target_workspace_id,
                "forkedFromAppName": source.name,
                EVENT_DATA: outcome.event_data,
            }
            await self.analytics.send_object_event(AnalyticsEvent.FORK, outcome.application, data)
        except Exception:
            logger.warning(
                "Error sending fork analytics event",
                exc_info=True,
                extra={"new_application_id": outcome.application.id},
            )
