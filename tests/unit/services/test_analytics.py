"""Unit tests for the audit-log analytics emitter"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from forkflow.models.enums import AnalyticsEvent
from forkflow.models.orm.audit import AuditLog
from forkflow.services.analytics import AuditLogAnalyticsEmitter
from tests.helpers.factories import make_application, make_workspace


def make_session_factory():
    session = MagicMock()
    session.commit = AsyncMock()
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = None
    return factory, session


class TestAuditLogAnalyticsEmitter:
    @pytest.mark.asyncio
    async def test_writes_audit_row(self):
        """Should persist one audit row describing the event."""
        factory, session = make_session_factory()
        emitter = AuditLogAnalyticsEmitter(session_factory=factory)
        forked = make_application(id="fork-1", workspace_id="target-ws")

        result = await emitter.send_object_event(
            AnalyticsEvent.FORK,
            forked,
            {"forkedFromAppId": "app-1", "eventData": {"workspace": make_workspace()}},
        )

        assert result is forked
        session.add.assert_called_once()
        entry = session.add.call_args.args[0]
        assert isinstance(entry, AuditLog)
        assert entry.action == "application.fork"
        assert entry.resource_type == "application"
        assert entry.resource_id == "fork-1"
        assert entry.workspace_id == "target-ws"
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_serializes_models_in_payload(self):
        """Should store pydantic models in the payload as plain JSON."""
        factory, session = make_session_factory()
        emitter = AuditLogAnalyticsEmitter(session_factory=factory)

        await emitter.send_object_event(
            AnalyticsEvent.FORK,
            make_application(),
            {"eventData": {"workspace": make_workspace(id="ws-9", name="Nine")}},
        )

        details = session.add.call_args.args[0].details
        assert details["eventData"]["workspace"]["id"] == "ws-9"
        assert details["eventData"]["workspace"]["name"] == "Nine"

    @pytest.mark.asyncio
    async def test_disabled_analytics_is_noop(self):
        """Should skip persistence when analytics are disabled."""
        factory, session = make_session_factory()
        emitter = AuditLogAnalyticsEmitter(session_factory=factory)
        application = make_application()

        with patch(
            "forkflow.services.analytics.get_settings",
            return_value=MagicMock(analytics_enabled=False),
        ):
            result = await emitter.send_object_event(AnalyticsEvent.FORK, application, {})

        assert result is application
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_commit_errors_propagate(self):
        """Should let persistence errors reach the caller."""
        factory, session = make_session_factory()
        session.commit.side_effect = RuntimeError("db down")
        emitter = AuditLogAnalyticsEmitter(session_factory=factory)

        with pytest.raises(RuntimeError, match="db down"):
            await emitter.send_object_event(AnalyticsEvent.FORK, make_application(), {})
