"""Pytest configuration and fixtures for custodian tests."""

import os
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import yaml

repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from custodian import Registry  # noqa: E402


@pytest.fixture
def registry() -> Generator[Registry, None, None]:
    """Provide a named registry.

    Yields
    ------
    Registry
        Fresh registry in the active state
    """
    yield Registry(name="test")


@pytest.fixture
def release_log() -> list[str]:
    """Shared log that release callbacks append to."""
    return []


@pytest.fixture
def config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary config file path and clean up environment.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory path

    Yields
    ------
    Path
        Path to temporary config file
    """
    config_path = tmp_path / "custodian.yaml"

    original_env = os.environ.get("CUSTODIAN_CONFIG")
    os.environ["CUSTODIAN_CONFIG"] = str(config_path)

    yield config_path

    if original_env is not None:
        os.environ["CUSTODIAN_CONFIG"] = original_env
    elif "CUSTODIAN_CONFIG" in os.environ:
        del os.environ["CUSTODIAN_CONFIG"]


@pytest.fixture
def write_config(config_file: Path):
    """Helper fixture to write config data to file.

    Parameters
    ----------
    config_file : Path
        Path to config file from config_file fixture

    Returns
    -------
    callable
        Function that takes config_data dict and writes to file
    """

    def _write(config_data: dict[str, Any]) -> None:
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

    return _write
