"""Shared fixtures for forking service tests"""

import pytest

from forkflow.models.contracts.applications import User
from forkflow.services.forking.service import ApplicationForkingService
from tests.helpers.factories import make_application, make_user, make_workspace
from tests.helpers.fakes import (
    InMemoryApplicationLookup,
    InMemoryWorkspaceLookup,
    PassthroughResultProjector,
    RecordingAnalyticsEmitter,
    RecordingForkExecutor,
    StaticSessionUserService,
)


@pytest.fixture
def applications():
    """Lookup holding the source application 'app-1' in workspace 'source-ws'"""
    return InMemoryApplicationLookup([make_application()])


@pytest.fixture
def workspaces():
    lookup = InMemoryWorkspaceLookup()
    lookup.add(make_workspace(id="source-ws", name="Source", default_environment_id="env-source"))
    lookup.add(make_workspace())
    return lookup


@pytest.fixture
def executor(applications):
    return RecordingForkExecutor(applications)


@pytest.fixture
def analytics():
    return RecordingAnalyticsEmitter()


@pytest.fixture
def build_service(applications, workspaces, executor, analytics):
    """Build a forking service acting as ``user`` (signed in by default)."""

    def _build(user: User | None = None, **overrides) -> ApplicationForkingService:
        kwargs = {
            "applications": applications,
            "workspaces": workspaces,
            "session_users": StaticSessionUserService(user or make_user()),
            "fork_executor": executor,
            "analytics": analytics,
            "result_projector": PassthroughResultProjector(),
        }
        kwargs.update(overrides)
        return ApplicationForkingService(**kwargs)

    return _build
