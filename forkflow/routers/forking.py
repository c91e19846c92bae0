"""
Forking Router

Fork an application into a workspace.

The endpoint awaits a detached fork: if the client disconnects, the request
is cancelled but the copy continues, and the new application shows up on
the client's next refresh.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from forkflow.core.auth import RequestSessionUserService
from forkflow.core.exceptions import ForkExecutionError, ForkingNotAllowedError, NotFoundError
from forkflow.models.contracts.applications import ApplicationImportResult
from forkflow.services.forking.collaborators import ForkingCollaborators, SessionUserService
from forkflow.services.forking.service import ApplicationForkingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["Applications"])


# =============================================================================
# Dependencies
# =============================================================================


def get_session_user_service(request: Request) -> SessionUserService:
    return RequestSessionUserService(request)


def get_forking_service(
    request: Request,
    session_users: Annotated[SessionUserService, Depends(get_session_user_service)],
) -> ApplicationForkingService:
    collaborators: ForkingCollaborators | None = getattr(request.app.state, "forking", None)
    if collaborators is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Forking is not configured",
        )
    return ApplicationForkingService.from_collaborators(collaborators, session_users)


ForkingService = Annotated[ApplicationForkingService, Depends(get_forking_service)]


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "/{application_id}/fork/{workspace_id}",
    response_model=ApplicationImportResult,
    summary="Fork an application into a workspace",
)
async def fork_application(
    application_id: str,
    workspace_id: str,
    service: ForkingService,
    branch_name: Annotated[str | None, Query(alias="branchName")] = None,
) -> ApplicationImportResult:
    """
    Fork an application (from the given branch, or the default branch)
    into the target workspace.
    """
    try:
        return await service.fork_to_workspace(application_id, workspace_id, branch_name)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )
    except ForkingNotAllowedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=e.message,
        )
    except ForkExecutionError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )
