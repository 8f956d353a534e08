"""Release strategy resolution and dispatch.

A resource is classified once, when it is handed to a registry, into one of
the ``ReleaseKind`` variants. The resulting ``ReleaseStrategy`` is stored next
to the resource and is the only thing consulted when the resource is later
released.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from custodian.constants import (
    DEFAULT_FALLBACK_METHODS,
    DEFAULT_RELEASE_METHOD,
    ReleaseKind,
)
from custodian.exceptions import UnresolvableResourceError

logger = logging.getLogger(__name__)

AWAITABLE_CAPABILITIES = ("done", "add_done_callback", "cancel")
"""Operations an object must expose to be treated as a cancellable awaitable."""


@dataclass(frozen=True)
class ReleaseStrategy:
    """Resolved release action of a tracked resource.

    Attributes
    ----------
    kind : ReleaseKind
        Release variant
    method : str | None
        Method name to call, only set for ``ReleaseKind.NAMED_METHOD``
    """

    kind: ReleaseKind
    method: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ReleaseKind.NAMED_METHOD and not self.method:
            raise ValueError("named method strategy requires a method name")
        if self.kind is not ReleaseKind.NAMED_METHOD and self.method is not None:
            raise ValueError(f"{self.kind.value} strategy does not take a method name")

    @classmethod
    def named(cls, method: str) -> ReleaseStrategy:
        """Build a strategy that calls ``resource.<method>()``."""
        return cls(ReleaseKind.NAMED_METHOD, method)

    def describe(self) -> str:
        if self.kind is ReleaseKind.NAMED_METHOD:
            return f"{self.kind.value}:{self.method}"
        return self.kind.value


INVOKE = ReleaseStrategy(ReleaseKind.INVOKE)
CANCEL_TASK = ReleaseStrategy(ReleaseKind.CANCEL_TASK)
CANCEL_AWAITABLE = ReleaseStrategy(ReleaseKind.CANCEL_AWAITABLE)


def _accepts_no_arguments(func: Any) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins carry no signature metadata.
        return True

    try:
        signature.bind()
    except TypeError:
        return False

    return True


def is_plain_callable(resource: Any, method: str | None = None) -> bool:
    """Check whether a resource is released by calling it.

    Parameters
    ----------
    resource : Any
        Resource to classify
    method : str | None
        Explicit release method requested by the caller. Callable objects that
        are not routines defer to it.

    Returns
    -------
    bool
        True for callables that can be invoked without arguments
    """
    if not callable(resource) or isinstance(resource, type):
        return False

    is_routine = inspect.isroutine(resource) or isinstance(resource, functools.partial)
    if method is not None and not is_routine:
        return False

    return _accepts_no_arguments(resource)


def is_task(resource: Any) -> bool:
    """Check whether a resource is a suspended native coroutine or generator."""
    return inspect.iscoroutine(resource) or inspect.isgenerator(resource)


def is_awaitable(resource: Any) -> bool:
    """Check whether a resource structurally looks like a cancellable future.

    The check is duck-typed so that ``asyncio`` futures and tasks,
    ``concurrent.futures.Future`` and third-party look-alikes all qualify
    without importing their types.
    """
    return all(callable(getattr(resource, name, None)) for name in AWAITABLE_CAPABILITIES)


def resolve(
    resource: Any,
    method: str | None = None,
    *,
    default_method: str = DEFAULT_RELEASE_METHOD,
    fallback_methods: Iterable[str] = DEFAULT_FALLBACK_METHODS,
) -> ReleaseStrategy:
    """Resolve the release strategy of a resource.

    Parameters
    ----------
    resource : Any
        Resource to classify
    method : str | None
        Explicit release method name, used for composite objects
    default_method : str
        Method name tried first when no explicit method is given
    fallback_methods : Iterable[str]
        Conventional method names tried after ``default_method``

    Returns
    -------
    ReleaseStrategy
        Strategy to apply when the resource is released

    Raises
    ------
    UnresolvableResourceError
        If the resource matches no strategy and no explicit method was given

    Notes
    -----
    Checks run in a fixed precedence order and the first match wins:
    zero-argument callable, native coroutine or generator, cancellable
    awaitable, explicit or default method, conventional method names.
    """
    if is_plain_callable(resource, method):
        return INVOKE

    if is_task(resource):
        return CANCEL_TASK

    if is_awaitable(resource):
        return CANCEL_AWAITABLE

    if method is not None:
        return ReleaseStrategy.named(method)

    for name in (default_method, *fallback_methods):
        if callable(getattr(resource, name, None)):
            return ReleaseStrategy.named(name)

    raise UnresolvableResourceError(resource)


def release(resource: Any, strategy: ReleaseStrategy) -> None:
    """Apply a resolved strategy to a resource.

    Parameters
    ----------
    resource : Any
        Resource to release
    strategy : ReleaseStrategy
        Strategy resolved for the resource

    Notes
    -----
    Exceptions raised by the release operation propagate unchanged.
    Cancellation of tasks and awaitables is only requested.
    """
    kind = strategy.kind

    if kind is ReleaseKind.INVOKE:
        resource()
    elif kind is ReleaseKind.CANCEL_TASK:
        resource.close()
    elif kind is ReleaseKind.CANCEL_AWAITABLE:
        resource.cancel()
    else:
        getattr(resource, strategy.method)()

    logger.debug("Released %s via %s", type(resource).__name__, strategy.describe())
