"""Custodian - release every resource you acquire, exactly once."""

from __future__ import annotations

from custodian.constants import OnReleaseError, RegistryState, ReleaseKind, ReleaseOrder
from custodian.core import (
    ConfigLoader,
    Connection,
    Entry,
    Registry,
    RegistryConfig,
    ReleaseStrategy,
    Signal,
    load_registry_config,
    release,
    resolve,
)
from custodian.exceptions import (
    AggregateReleaseError,
    InvalidStateError,
    RegistryError,
    ReleaseError,
    UnresolvableResourceError,
)

__version__ = "0.1.0"

__all__ = [
    "OnReleaseError",
    "RegistryState",
    "ReleaseKind",
    "ReleaseOrder",
    "ConfigLoader",
    "Connection",
    "Entry",
    "Registry",
    "RegistryConfig",
    "ReleaseStrategy",
    "Signal",
    "load_registry_config",
    "release",
    "resolve",
    "AggregateReleaseError",
    "InvalidStateError",
    "RegistryError",
    "ReleaseError",
    "UnresolvableResourceError",
]
