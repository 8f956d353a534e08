"""Registry-specific exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from custodian.core.strategy import ReleaseStrategy


class RegistryError(Exception):
    """Base exception for registry failures."""


class InvalidStateError(RegistryError):
    """Raised when an operation is not allowed in the registry's current state."""


class UnresolvableResourceError(RegistryError, TypeError):
    """Raised when a resource matches no known release strategy.

    Parameters
    ----------
    resource : Any
        Resource that could not be classified
    """

    def __init__(self, resource: Any) -> None:
        super().__init__(
            f"Cannot determine how to release {type(resource).__name__!s} object; "
            f"pass an explicit release method"
        )
        self.resource = resource


class ReleaseError(RegistryError):
    """Raised when the release operation of a tracked resource fails.

    The exception raised by the release operation is chained as ``__cause__``.

    Parameters
    ----------
    message : str
        Human-readable error description
    resource : Any
        Resource whose release failed
    strategy : ReleaseStrategy | None
        Strategy that was being applied
    """

    def __init__(
        self,
        message: str,
        resource: Any = None,
        strategy: ReleaseStrategy | None = None,
    ) -> None:
        super().__init__(message)
        self.resource = resource
        self.strategy = strategy


class AggregateReleaseError(ReleaseError):
    """Raised after a bulk release in which one or more releases failed.

    Parameters
    ----------
    errors : list[ReleaseError]
        Every failure of the pass, in release order
    """

    def __init__(self, errors: list[ReleaseError]) -> None:
        super().__init__(f"{len(errors)} resource(s) failed to release")
        self.errors = list(errors)
