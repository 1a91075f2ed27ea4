"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidTransition(DomainException):
    """A state change is not legal from the current state."""

    def __init__(self, entity: str, current: str, attempted: str) -> None:
        self.entity = entity
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{attempted}'"
        )


class PreconditionFailed(DomainException):
    """A required prior step has not happened yet."""


class AlreadyTerminal(DomainException):
    """The order is cancelled or delivered and accepts no further changes."""

    def __init__(self, order_id: int | None, status: str) -> None:
        self.order_id = order_id
        self.status = status
        super().__init__(f"Order #{order_id} is already {status}")


class UpstreamUnavailable(DomainException):
    """The campaign store could not be read and no usable cache exists."""


class ConcurrentModificationError(DomainException):
    """The order was changed by someone else since it was loaded."""

    def __init__(self, order_id: int, expected: int, found: int) -> None:
        self.order_id = order_id
        self.expected = expected
        self.found = found
        super().__init__(
            f"Order #{order_id} was modified concurrently "
            f"(expected version {expected}, found {found})"
        )
