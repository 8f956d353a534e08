"""Logging helpers for custodian."""

from custodian.logging.formatters import RegistryFormatter

__all__ = ["RegistryFormatter"]
