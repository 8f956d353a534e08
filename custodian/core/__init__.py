"""Core custodian functionality."""

from __future__ import annotations

from custodian.core.config import ConfigLoader, RegistryConfig, load_registry_config
from custodian.core.events import Connection, Signal
from custodian.core.registry import Entry, Registry
from custodian.core.strategy import (
    ReleaseStrategy,
    is_awaitable,
    is_plain_callable,
    is_task,
    release,
    resolve,
)

__all__ = [
    "ConfigLoader",
    "RegistryConfig",
    "load_registry_config",
    "Connection",
    "Signal",
    "Entry",
    "Registry",
    "ReleaseStrategy",
    "is_awaitable",
    "is_plain_callable",
    "is_task",
    "release",
    "resolve",
]
