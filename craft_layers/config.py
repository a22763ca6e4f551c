# -*- Mode:Python; indent-tabs-mode:nil; tab-width:4 -*-
#
# Copyright 2026 Canonical Ltd.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License version 3 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Layer application settings."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import pydantic
import yaml
from xdg import BaseDirectory  # type: ignore

from craft_layers import errors
from craft_layers.archive import DEFAULT_BLOCK_SIZE

logger = logging.getLogger(__name__)

ROOTFS_ENV = "CRAFT_LAYERS_ROOTFS"
CONFIG_RESOURCE = "craft-layers"
CONFIG_FILE_NAME = "config.yaml"


class LayerConfig(pydantic.BaseModel):
    """Settings used to apply a layer to a root filesystem."""

    model_config = pydantic.ConfigDict(
        validate_assignment=True,
        extra="forbid",
        alias_generator=lambda s: s.replace("_", "-"),
        populate_by_name=True,
    )

    rootfs_dir: Path
    """The directory accumulating the contents of applied layers."""

    block_size: int = pydantic.Field(default=DEFAULT_BLOCK_SIZE, gt=0)
    """The size of the blocks read from layer archives."""

    numeric_owner: bool = False
    """Use numeric ids from the archive instead of user and group names."""

    preserve_xattrs: bool = True
    """Restore extended attributes and ACLs recorded in the archive."""

    @classmethod
    def unmarshal(cls, data: Dict[str, Any]) -> "LayerConfig":
        """Create and populate a new ``LayerConfig`` object from dictionary data.

        :param data: The dictionary data to unmarshal.

        :return: The newly created object.

        :raise TypeError: If data is not a dictionary.
        :raise pydantic.ValidationError: If the data fails validation.
        """
        if not isinstance(data, dict):
            raise TypeError("Layer configuration must be a dictionary.")

        return cls.model_validate(data)

    def marshal(self) -> Dict[str, Any]:
        """Create a dictionary containing the configuration data.

        :return: The newly created dictionary.
        """
        return self.model_dump(mode="json", by_alias=True)


def load_config(environ: Optional[Mapping[str, str]] = None) -> LayerConfig:
    """Obtain the layer settings from the configuration file and environment.

    The configuration file is ``craft-layers/config.yaml`` in the XDG
    configuration directories. The root filesystem directory set in the
    environment takes precedence over the one in the file.

    :param environ: The environment to read, defaults to ``os.environ``.

    :return: The layer settings.

    :raise ConfigurationError: If settings are missing or invalid.
    """
    if environ is None:
        environ = os.environ

    data: Dict[str, Any] = {}

    config_file = BaseDirectory.load_first_config(CONFIG_RESOURCE, CONFIG_FILE_NAME)
    if config_file:
        data.update(_read_config_file(Path(config_file)))

    rootfs_dir = environ.get(ROOTFS_ENV)
    if rootfs_dir:
        logger.debug("root filesystem set by %s", ROOTFS_ENV)
        data["rootfs-dir"] = rootfs_dir

    if not data.get("rootfs-dir"):
        raise errors.ConfigurationError("root filesystem directory is not set")

    try:
        return LayerConfig.unmarshal(data)
    except pydantic.ValidationError as err:
        raise errors.ConfigurationError(_format_validation_error(err)) from err


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    logger.debug("load configuration from %s", config_file)
    try:
        with config_file.open() as file:
            data = yaml.safe_load(file)
    except yaml.YAMLError as err:
        raise errors.ConfigurationError(f"cannot parse {str(config_file)!r}") from err

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise errors.ConfigurationError(f"{str(config_file)!r} must contain a mapping")

    return {str(key).replace("_", "-"): value for key, value in data.items()}


def _format_validation_error(err: pydantic.ValidationError) -> str:
    messages = []
    for error in err.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        messages.append(f"{error['msg']} in field {field!r}")

    return "; ".join(messages)
