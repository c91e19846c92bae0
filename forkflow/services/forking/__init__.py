# Application forking: orchestration plus the contracts it depends on
from forkflow.services.forking.authorizer import ForkAuthorizer, allow_fork
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
from forkflow.services.forking.service import ApplicationForkingService

__all__ = [
    "AnalyticsEmitter",
    "ApplicationForkingService",
    "ApplicationLookup",
    "BranchResolver",
    "ForkAuthorizer",
    "ForkExecutor",
    "ForkingCollaborators",
    "ResultProjector",
    "SessionUserService",
    "WorkspaceLookup",
    "allow_fork",
]
