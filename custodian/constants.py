"""Global constants for custodian.

This module contains library-wide constants shared by the strategy resolver,
the registry and the configuration loader.
"""

from enum import Enum

DEFAULT_RELEASE_METHOD = "destroy"
"""Release method tried first on objects added without an explicit method.

Composite objects that expose a ``destroy()`` operation are released through
it unless the caller names a different method at insertion time.
"""

SUBSCRIPTION_RELEASE_METHOD = "disconnect"
"""Release method of event subscriptions.

Used for handles returned by ``Registry.connect`` and for any object that
looks like a subscription handle.
"""

DEFAULT_FALLBACK_METHODS = (SUBSCRIPTION_RELEASE_METHOD, "dispose", "close")
"""Conventional release method names probed after the default method.

Checked in order; the first callable attribute found wins.
"""

FINALIZE_METHOD = "finalize"
"""Release method used for child registries created by ``Registry.extend``."""

DETACH_METHOD = "detach"
"""Release method of ``weakref.finalize`` handles used by ``bind_to_lifetime``."""

DESTROYING_ATTRIBUTE = "destroying"
"""Attribute name of an owner's destruction event source."""

CONFIG_ENV_VAR = "CUSTODIAN_CONFIG"
"""Environment variable naming the YAML configuration file."""

DEFAULT_CONFIG_FILE = "custodian.yaml"
"""Configuration file looked up when no path or environment variable is set."""


class RegistryState(str, Enum):
    """Lifecycle states of a registry."""

    ACTIVE = "active"
    CLEARING = "clearing"
    FINALIZED = "finalized"


class ReleaseKind(str, Enum):
    """Kinds of release action a tracked resource can resolve to."""

    INVOKE = "invoke"
    CANCEL_TASK = "cancel_task"
    CANCEL_AWAITABLE = "cancel_awaitable"
    NAMED_METHOD = "named_method"


class OnReleaseError(str, Enum):
    """What a bulk release does with failures once the pass is complete."""

    RAISE = "raise"
    LOG = "log"


class ReleaseOrder(str, Enum):
    """Order in which a bulk release walks the tracked resources."""

    INSERTION = "insertion"
    REVERSE = "reverse"
