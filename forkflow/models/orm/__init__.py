"""
SQLAlchemy ORM Models

Pure database models using SQLAlchemy 2.0 declarative style.
For API schemas, see forkflow.models.contracts.
"""

from forkflow.models.orm.audit import AuditLog
from forkflow.models.orm.base import Base

__all__ = [
    "Base",
    "AuditLog",
]
