"""
Fork Authorization

Decides whether a user may fork an application. Pure functions, no I/O.
"""

from forkflow.models.contracts.applications import Application, User
from forkflow.models.enums import AclPermission


def allow_fork(
    user: User,
    application: Application,
    edit_permission: AclPermission = AclPermission.MANAGE_APPLICATIONS,
) -> bool:
    """
    Check whether ``user`` may fork ``application``.

    Allowed when either:
    - the user is signed in and can edit the application, or
    - the application opted in to forking (public templates/examples),
      which also admits anonymous users and read-only members
    """
    can_edit = not user.is_anonymous and edit_permission in application.user_permissions
    return can_edit or application.forking_enabled is True


class ForkAuthorizer:
    """Wraps allow_fork() with the edit permission configured for the deployment."""

    def __init__(self, edit_permission: AclPermission = AclPermission.MANAGE_APPLICATIONS):
        self.edit_permission = edit_permission

    def allow_fork(self, user: User, application: Application) -> bool:
        return allow_fork(user, application, self.edit_permission)
