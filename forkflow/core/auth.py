"""
Session User Resolution

Authentication itself happens upstream: middleware verifies credentials and
stores the resulting principal on ``request.state.user``. This module turns
that principal into the User the forking workflow evaluates.
"""

import logging
from typing import Any

from fastapi import Request

from forkflow.models.contracts.applications import User
from forkflow.services.forking.collaborators import SessionUserService

logger = logging.getLogger(__name__)


class RequestSessionUserService(SessionUserService):
    """
    Resolves the user attached to an incoming request.

    Requests without an authenticated principal act as the anonymous user.
    """

    def __init__(self, request: Request):
        self.request = request

    async def get_current_user(self) -> User:
        principal: Any = getattr(self.request.state, "user", None)
        if principal is None:
            return User.anonymous()
        if isinstance(principal, User):
            return principal
        if isinstance(principal, dict):
            return User.model_validate(principal)

        # Principal objects from other auth layers (user_id/email attributes)
        email = getattr(principal, "email", None)
        if not email:
            logger.warning(
                f"Request principal {type(principal).__name__} has no email, treating as anonymous"
            )
            return User.anonymous()

        user_id = getattr(principal, "user_id", None) or getattr(principal, "id", None)
        return User(
            id=str(user_id) if user_id is not None else None,
            email=email,
            is_anonymous=bool(getattr(principal, "is_anonymous", False)),
        )
