"""Product configuration.

This module provides the configuration model and loader for the product
settings that drive btrfs proposals: the machine architecture, the path
of the default subvolume and the list of proposed subvolumes.

Configuration is stored in ~/.config/partctl/product.toml, for example::

    arch = "x86_64"
    default_subvolume = "@"

    [[subvolumes]]
    path = "home"

    [[subvolumes]]
    path = "var"
    copy_on_write = false
"""

import logging
import platform
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from partctl.core.paths import get_product_config_path
from partctl.errors import PartctlError
from partctl.graph.btrfs import DEFAULT_SUBVOLUME_PATH
from partctl.subvolumes.specification import SubvolSpecification, fallback_list

logger = logging.getLogger(__name__)


class ProductConfig(BaseModel):
    """Product settings for btrfs subvolume proposals.

    Attributes:
        arch: Machine architecture used to filter subvolume specifications.
        default_subvolume: Path of the default subvolume of new btrfs
            filesystems ("" to use the top-level subvolume).
        subvolumes: Proposed subvolumes. None or empty means the built-in
            fallback list.
    """

    model_config = ConfigDict(extra="forbid")

    arch: Annotated[
        str,
        Field(default_factory=platform.machine, description="Machine architecture"),
    ]
    default_subvolume: Annotated[
        str,
        Field(description="Default subvolume path of new btrfs filesystems"),
    ] = DEFAULT_SUBVOLUME_PATH
    subvolumes: Annotated[
        list[SubvolSpecification] | None,
        Field(description="Proposed subvolumes for a root filesystem"),
    ] = None

    def proposed_subvolumes(self) -> list[SubvolSpecification]:
        """Return the configured subvolumes, or the fallback list if none."""
        if not self.subvolumes:
            return fallback_list()
        return list(self.subvolumes)


class ProductConfigError(PartctlError):
    """Base exception for product configuration errors."""


class ProductConfigParseError(ProductConfigError):
    """Raised when the product config file cannot be parsed."""


def load_product_config(path: Path | None = None) -> ProductConfig:
    """Load product configuration from a TOML file.

    A missing file is not an error: the default configuration is returned.

    Args:
        path: Path to the config file. If None, uses the default product config path.

    Returns:
        Validated ProductConfig object.

    Raises:
        ProductConfigParseError: If the TOML syntax is invalid.
        ProductConfigError: If the file cannot be read or the content
            doesn't match the schema.
    """
    config_path = path or get_product_config_path()

    if not config_path.exists():
        logger.debug("No product config at %s, using defaults", config_path)
        return ProductConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ProductConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ProductConfigError(f"Failed to read product config: {e}") from e

    try:
        return ProductConfig.model_validate(data)
    except ValidationError as e:
        raise ProductConfigError(f"Invalid product config content: {e}") from e
