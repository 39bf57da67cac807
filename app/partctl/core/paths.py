"""XDG-compliant path management for partctl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration storage.

XDG defaults:
- Config: ~/.config/partctl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "partctl"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/partctl/ (or XDG_CONFIG_HOME/partctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_product_config_path() -> Path:
    """Get the product configuration file path.

    The product configuration defines the architecture, the default btrfs
    subvolume and the subvolumes proposed for a root filesystem.

    Returns:
        Path to ~/.config/partctl/product.toml.
    """
    return get_config_dir() / "product.toml"
