from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import InterpolationResolutionError

from custodian.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_FALLBACK_METHODS,
    DEFAULT_RELEASE_METHOD,
    OnReleaseError,
    ReleaseOrder,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryConfig:
    """Settings shared by a registry and the child registries it creates.

    Attributes
    ----------
    default_method : str
        Release method tried first on objects added without an explicit method
    fallback_methods : tuple[str, ...]
        Conventional release method names tried after ``default_method``
    on_release_error : OnReleaseError
        Whether a bulk release raises or only logs collected failures
    release_order : ReleaseOrder
        Whether a bulk release walks entries in insertion or reverse order
    """

    default_method: str = DEFAULT_RELEASE_METHOD
    fallback_methods: tuple[str, ...] = DEFAULT_FALLBACK_METHODS
    on_release_error: OnReleaseError = OnReleaseError.RAISE
    release_order: ReleaseOrder = ReleaseOrder.INSERTION

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> RegistryConfig:
        """Build a config from a validated ``registry`` section."""
        return cls(
            default_method=values["default_method"],
            fallback_methods=tuple(values["fallback_methods"]),
            on_release_error=OnReleaseError(values["on_release_error"]),
            release_order=ReleaseOrder(values["release_order"]),
        )


class ConfigLoader:
    """Load and merge YAML configuration with defaults."""

    def __init__(self) -> None:
        """Initialize ConfigLoader with built-in registry defaults."""
        self.BUILT_IN_DEFAULTS = {
            "default_method": DEFAULT_RELEASE_METHOD,
            "fallback_methods": list(DEFAULT_FALLBACK_METHODS),
            "on_release_error": OnReleaseError.RAISE.value,
            "release_order": ReleaseOrder.INSERTION.value,
        }

    def load_config(self, config_path: str | None = None) -> dict[str, Any]:
        """Load configuration from YAML file.

        Parameters
        ----------
        config_path : str | None
            Path to YAML config file. If None, checks CUSTODIAN_CONFIG env var,
            then falls back to custodian.yaml

        Returns
        -------
        dict[str, Any]
            Parsed configuration with a registry section, with all variable
            interpolations resolved

        Raises
        ------
        ValueError
            If the file is not valid YAML or a variable cannot be resolved
        RuntimeError
            If the file cannot be read
        omegaconf.errors.InterpolationResolutionError
            If undefined variables are referenced or circular references exist
        """
        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE)

        config_file = Path(config_path)

        if not config_file.exists():
            return {"registry": {}}

        try:
            cfg = OmegaConf.load(config_file)
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML config file %s: %s", config_file, e)
            raise ValueError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            logger.error("Failed to read config file %s: %s", config_file, e)
            raise RuntimeError(f"Failed to read config file {config_file}: {e}") from e

        if cfg is None:
            return {"registry": {}}

        if "vars" in cfg:
            vars_dict = OmegaConf.to_container(cfg.vars, resolve=False)
            for key, value in vars_dict.items():
                if key not in cfg:
                    cfg[key] = value

        try:
            config = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        except InterpolationResolutionError as e:
            logger.error("Failed to resolve configuration variables: %s", e)
            raise
        except (ValueError, KeyError, AttributeError) as e:
            logger.error("Failed to resolve configuration variables: %s", e)
            raise ValueError(f"Configuration variable resolution error: {e}") from e

        config.setdefault("registry", {})
        return config

    def get_registry_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Merge built-in defaults with the registry section of a loaded config.

        Parameters
        ----------
        config : dict[str, Any]
            Full configuration from YAML

        Returns
        -------
        dict[str, Any]
            Merged registry settings
        """
        merged = copy.deepcopy(self.BUILT_IN_DEFAULTS)

        section = config.get("registry") or {}
        if not isinstance(section, dict):
            raise ValueError("registry section must be a mapping")

        for key, value in section.items():
            merged[key] = value

        return merged

    def validate_config(self, config: dict[str, Any]) -> None:
        """Validate merged registry settings.

        Parameters
        ----------
        config : dict[str, Any]
            Registry settings to validate

        Raises
        ------
        ValueError
            If configuration is invalid
        """
        unknown = sorted(set(config) - set(self.BUILT_IN_DEFAULTS))
        if unknown:
            raise ValueError(f"Unknown registry settings: {unknown}")

        default_method = config.get("default_method")
        if not isinstance(default_method, str) or not default_method.isidentifier():
            raise ValueError("default_method must be a method name")

        fallback_methods = config.get("fallback_methods")
        if not isinstance(fallback_methods, list):
            raise ValueError("fallback_methods must be a list")

        for item in fallback_methods:
            if not isinstance(item, str) or not item.isidentifier():
                raise ValueError(f"Invalid fallback method name: {item!r}")

        self._validate_on_release_error(config)
        self._validate_release_order(config)

    def _validate_on_release_error(self, config: dict[str, Any]) -> None:
        valid_values = [action.value for action in OnReleaseError]
        value = config.get("on_release_error")

        if value not in valid_values:
            raise ValueError(
                f"on_release_error must be one of {valid_values}, got {value!r}"
            )

    def _validate_release_order(self, config: dict[str, Any]) -> None:
        valid_values = [order.value for order in ReleaseOrder]
        value = config.get("release_order")

        if value not in valid_values:
            raise ValueError(f"release_order must be one of {valid_values}, got {value!r}")


def load_registry_config(config_path: str | None = None) -> RegistryConfig:
    """Load, merge and validate registry settings from YAML.

    Parameters
    ----------
    config_path : str | None
        Path to YAML config file, see ``ConfigLoader.load_config``

    Returns
    -------
    RegistryConfig
        Settings ready to pass to ``Registry``
    """
    loader = ConfigLoader()
    merged = loader.get_registry_config(loader.load_config(config_path))
    loader.validate_config(merged)
    return RegistryConfig.from_dict(merged)
