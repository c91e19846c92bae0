"""
Core Exceptions

Errors raised by the forking workflow. Routers translate them into
HTTP responses; everything else lets them propagate unchanged.
"""

from forkflow.models.enums import EntityKind


class ForkingError(Exception):
    """Base class for errors surfaced to callers of the forking service."""

    def __init__(self, message: str = "Forking failed"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(ForkingError):
    """
    Raised when an entity is absent or the user lacks the permission
    required to read it.

    Absent and unauthorized are deliberately indistinguishable to callers.
    """

    def __init__(self, entity_kind: EntityKind, entity_id: str):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        super().__init__(f"Unable to find {entity_kind.value} {entity_id}")


class ForkingNotAllowedError(ForkingError):
    """Raised when the requesting user may not fork the source application."""

    def __init__(self, message: str = "Forking this application is not permitted at this time."):
        super().__init__(message)


class ForkExecutionError(ForkingError):
    """
    Raised when the deep copy of the application graph fails.

    The underlying error is chained as ``__cause__``.
    """

    def __init__(self, message: str = "Failed to copy the application into the target workspace"):
        super().__init__(message)
