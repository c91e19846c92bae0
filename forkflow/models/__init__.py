# Data models: pydantic contracts and SQLAlchemy ORM
from forkflow.models.orm import AuditLog, Base

__all__ = ["AuditLog", "Base"]
