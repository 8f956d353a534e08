"""Registry tracking heterogeneous resources until they are released."""

from __future__ import annotations

import functools
import logging
import types
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from custodian.constants import (
    DESTROYING_ATTRIBUTE,
    DETACH_METHOD,
    FINALIZE_METHOD,
    SUBSCRIPTION_RELEASE_METHOD,
    OnReleaseError,
    ReleaseKind,
    ReleaseOrder,
    RegistryState,
)
from custodian.core.config import RegistryConfig
from custodian.core.strategy import ReleaseStrategy, release, resolve
from custodian.exceptions import (
    AggregateReleaseError,
    InvalidStateError,
    ReleaseError,
    UnresolvableResourceError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Entry:
    """A tracked resource paired with its resolved release strategy."""

    resource: Any
    strategy: ReleaseStrategy


class Registry:
    """Tracks resources and releases each of them exactly once.

    Resources are classified when added and released either one at a time
    (``remove``) or all together (``clear`` keeps the registry usable,
    ``finalize`` retires it for good). Registries nest: ``extend`` returns a
    child that is finalized when its parent releases it.

    The registry is not thread-safe; operations are expected to run on one
    thread or event loop. The ``CLEARING`` state only guards against release
    callbacks re-entering the registry.

    Parameters
    ----------
    config : RegistryConfig | None
        Resolution and error-policy settings (defaults when None)
    name : str
        Label used in log records and ``repr()``

    Attributes
    ----------
    config : RegistryConfig
        Settings used by this registry and inherited by its children
    name : str
        Label used in log records and ``repr()``
    """

    def __init__(self, config: RegistryConfig | None = None, name: str = "") -> None:
        self.config = config or RegistryConfig()
        self.name = name
        self._entries: dict[int, Entry] = {}
        self._state = RegistryState.ACTIVE
        self._child_count = 0

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def finalized(self) -> bool:
        return self._state is RegistryState.FINALIZED

    @property
    def entries(self) -> tuple[Entry, ...]:
        """Snapshot of the tracked entries in insertion order."""
        return tuple(self._entries.values())

    @property
    def _log_extra(self) -> dict[str, str]:
        return {"registry": self.name}

    def strategy_of(self, resource: Any) -> ReleaseStrategy | None:
        """Return the strategy recorded for a resource, or None if untracked."""
        entry = self._lookup(resource)
        return entry.strategy if entry is not None else None

    def _lookup(self, resource: Any) -> Entry | None:
        entry = self._entries.get(id(resource))
        if entry is None or entry.resource is not resource:
            return None
        return entry

    def _pop(self, resource: Any) -> Entry | None:
        entry = self._lookup(resource)
        if entry is not None:
            del self._entries[id(resource)]
        return entry

    def _require_active(self, operation: str) -> None:
        if self._state is RegistryState.FINALIZED:
            raise InvalidStateError(f"registry finalized: cannot call {operation}")
        if self._state is RegistryState.CLEARING:
            raise InvalidStateError(f"cannot call {operation} while clearing")

    def add(self, resource: T, method: str | None = None) -> T:
        """Track a resource.

        Parameters
        ----------
        resource : T
            Resource to release later
        method : str | None
            Release method name for composite objects

        Returns
        -------
        T
            The resource itself, for inline use

        Raises
        ------
        InvalidStateError
            If the registry is clearing or finalized
        UnresolvableResourceError
            If the resource matches no release strategy

        Notes
        -----
        Re-adding a tracked resource replaces its strategy and moves it to the
        end of the release order; nothing is released. Awaitables are dropped
        from tracking, without being cancelled, once they settle on their own,
        even in the middle of a bulk release. Registries added without an
        explicit method are finalized on release.
        """
        self._require_active("add")

        if method is None and isinstance(resource, Registry):
            method = FINALIZE_METHOD

        strategy = resolve(
            resource,
            method,
            default_method=self.config.default_method,
            fallback_methods=self.config.fallback_methods,
        )

        key = id(resource)
        already_tracked = self._pop(resource) is not None
        self._entries[key] = Entry(resource, strategy)

        logger.debug(
            "Registered %s (%s)",
            type(resource).__name__,
            strategy.describe(),
            extra=self._log_extra,
        )

        if strategy.kind is ReleaseKind.CANCEL_AWAITABLE and not already_tracked:
            resource.add_done_callback(functools.partial(self._on_awaitable_settled, resource))

        return resource

    def _on_awaitable_settled(self, awaitable: Any, *_: Any) -> None:
        if self._state is RegistryState.FINALIZED:
            return

        if self._pop(awaitable) is not None:
            logger.debug(
                "Dropped settled %s", type(awaitable).__name__, extra=self._log_extra
            )

    def spawn(self, producer: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``producer(*args, **kwargs)`` and track the result.

        Returns
        -------
        T
            The produced resource
        """
        self._require_active("spawn")
        return self.add(producer(*args, **kwargs))

    def extend(self) -> Registry:
        """Create a child registry finalized when this one releases it.

        Returns
        -------
        Registry
            New child registry sharing this registry's config
        """
        self._require_active("extend")

        self._child_count += 1
        child_name = f"{self.name}.{self._child_count}" if self.name else ""
        child = Registry(config=self.config, name=child_name)

        return self.add(child, FINALIZE_METHOD)

    def remove(self, resource: Any) -> None:
        """Stop tracking a resource and release it.

        Untracked resources are ignored.

        Raises
        ------
        InvalidStateError
            If the registry is clearing or finalized
        ReleaseError
            If the release operation fails; the resource stays untracked
        """
        self._require_active("remove")

        entry = self._pop(resource)
        if entry is None:
            return

        self._release(entry)

    def remove_no_clean(self, resource: Any) -> None:
        """Stop tracking a resource without releasing it.

        Raises
        ------
        InvalidStateError
            If the registry is clearing or finalized
        """
        self._require_active("remove_no_clean")

        if self._pop(resource) is not None:
            logger.debug(
                "Untracked %s without release", type(resource).__name__, extra=self._log_extra
            )

    def connect(self, event_source: Any, callback: Callable[..., Any]) -> Any:
        """Subscribe a callback to an event source and track the subscription.

        Parameters
        ----------
        event_source : Any
            Object exposing ``connect(callback)``
        callback : Callable[..., Any]
            Function to subscribe

        Returns
        -------
        Any
            Subscription handle, released through ``disconnect()``
        """
        self._require_active("connect")
        subscription = event_source.connect(callback)
        return self.add(subscription, SUBSCRIPTION_RELEASE_METHOD)

    def bind_to_lifetime(self, owner: Any) -> Any:
        """Finalize this registry when an owner object is destroyed.

        Parameters
        ----------
        owner : Any
            Object exposing a ``destroying`` event source, or any object that
            supports weak references

        Returns
        -------
        Any
            Tracked subscription, or ``weakref.finalize`` handle for owners
            without a ``destroying`` event source

        Raises
        ------
        UnresolvableResourceError
            If the owner has no destruction event and cannot be weakly referenced
        """
        self._require_active("bind_to_lifetime")

        destroying = getattr(owner, DESTROYING_ATTRIBUTE, None)
        if destroying is not None and callable(getattr(destroying, "connect", None)):
            return self.connect(destroying, self._finalize_from_owner)

        try:
            handle = weakref.finalize(owner, self._finalize_from_owner)
        except TypeError as e:
            raise UnresolvableResourceError(owner) from e

        return self.add(handle, DETACH_METHOD)

    def _finalize_from_owner(self, *_: Any) -> None:
        if self._state is RegistryState.ACTIVE:
            self.finalize()
        elif self._state is RegistryState.CLEARING:
            logger.warning(
                "Owner destroyed while clearing; finalize skipped", extra=self._log_extra
            )

    def clear(self) -> None:
        """Release every tracked resource and stay usable.

        Raises
        ------
        InvalidStateError
            If the registry is clearing or finalized
        AggregateReleaseError
            If any release failed and the error policy is ``raise``
        """
        self._require_active("clear")
        errors = self._release_all()
        self._state = RegistryState.ACTIVE
        self._report(errors)

    def finalize(self) -> None:
        """Release every tracked resource and retire the registry.

        Every mutating call made afterwards raises ``InvalidStateError``.

        Raises
        ------
        InvalidStateError
            If the registry is clearing or already finalized
        AggregateReleaseError
            If any release failed and the error policy is ``raise``; the
            registry is finalized regardless
        """
        self._require_active("finalize")
        errors = self._release_all()
        self._state = RegistryState.FINALIZED
        self._entries = {}
        logger.debug("Registry finalized", extra=self._log_extra)
        self._report(errors)

    def _release_all(self) -> list[ReleaseError]:
        """Release entries one by one, removing each just before its release.

        Returns
        -------
        list[ReleaseError]
            Failures in release order

        Notes
        -----
        The state is left as ``CLEARING`` for the caller to move on. Only
        ``Exception`` subclasses are collected; anything else restores
        ``ACTIVE`` and propagates with the unreleased entries still tracked.
        """
        self._state = RegistryState.CLEARING
        errors: list[ReleaseError] = []
        reverse = self.config.release_order is ReleaseOrder.REVERSE

        try:
            while self._entries:
                key = next(reversed(self._entries)) if reverse else next(iter(self._entries))
                entry = self._entries.pop(key)

                try:
                    self._release(entry)
                except ReleaseError as e:
                    errors.append(e)
        except BaseException:
            self._state = RegistryState.ACTIVE
            raise

        return errors

    def _release(self, entry: Entry) -> None:
        try:
            release(entry.resource, entry.strategy)
        except Exception as e:
            logger.error(
                "Error releasing %s via %s: %s",
                type(entry.resource).__name__,
                entry.strategy.describe(),
                e,
                extra=self._log_extra,
            )
            raise ReleaseError(
                f"Failed to release {type(entry.resource).__name__}: {e}",
                entry.resource,
                entry.strategy,
            ) from e

    def _report(self, errors: list[ReleaseError]) -> None:
        if not errors:
            logger.debug("Cleanup completed successfully", extra=self._log_extra)
            return

        logger.info("Cleanup completed with %s errors", len(errors), extra=self._log_extra)

        if self.config.on_release_error is OnReleaseError.RAISE:
            raise AggregateReleaseError(errors)

    def __enter__(self) -> Registry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        if self._state is RegistryState.ACTIVE:
            self.finalize()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, resource: Any) -> bool:
        return self._lookup(resource) is not None

    def __repr__(self) -> str:
        label = f" {self.name}" if self.name else ""
        return f"<Registry{label} state={self._state.value} entries={len(self._entries)}>"
