"""
Analytics Service

Default AnalyticsEmitter: records analytics events as audit log rows.
"""

import logging
from typing import Any

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from forkflow.config import get_settings
from forkflow.core.database import get_session_factory
from forkflow.models.contracts.applications import Application
from forkflow.models.enums import AnalyticsEvent
from forkflow.models.orm.audit import AuditLog
from forkflow.services.forking.collaborators import AnalyticsEmitter

logger = logging.getLogger(__name__)

_payload_adapter = TypeAdapter(dict[str, Any])


class AuditLogAnalyticsEmitter(AnalyticsEmitter):
    """Writes one audit_logs row per event."""

    resource_type = "application"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory

    async def send_object_event(
        self,
        event: AnalyticsEvent,
        subject: Application,
        data: dict[str, Any],
    ) -> Application:
        """
        Persist ``event`` for ``subject``.

        No-op when analytics are disabled. Errors propagate; callers decide
        whether a failed event matters.
        """
        if not get_settings().analytics_enabled:
            return subject

        entry = AuditLog(
            workspace_id=subject.workspace_id,
            action=f"{self.resource_type}.{event.value.lower()}",
            resource_type=self.resource_type,
            resource_id=subject.id,
            details=_payload_adapter.dump_python(data, mode="json"),
        )

        session_factory = self._session_factory or get_session_factory()
        async with session_factory() as session:
            session.add(entry)
            await session.commit()

        logger.debug(
            f"Recorded {event.value} event for application {subject.id}",
            extra={"application_id": subject.id, "workspace_id": subject.workspace_id},
        )
        return subject
