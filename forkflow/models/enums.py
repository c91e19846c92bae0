"""
Enumeration types used across the forking service.
"""

from enum import Enum


class AclPermission(str, Enum):
    """Permission tokens a user may hold on an application or workspace"""
    READ_APPLICATIONS = "read:applications"
    MANAGE_APPLICATIONS = "manage:applications"
    WORKSPACE_MANAGE_APPLICATIONS = "manage:workspaceApplications"


class EntityKind(str, Enum):
    """Entity kinds reported by NotFoundError"""
    APPLICATION = "application"
    WORKSPACE = "workspace"


class AnalyticsEvent(str, Enum):
    """Analytics/audit event kinds"""
    FORK = "FORK"
