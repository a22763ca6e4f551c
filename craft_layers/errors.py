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

"""Craft layers errors."""

import dataclasses
from typing import Optional


@dataclasses.dataclass(repr=True)
class LayerError(Exception):
    """Unexpected error.

    :param brief: Brief description of error.
    :param details: Detailed information.
    :param resolution: Recommendation, if any.
    """

    brief: str
    details: Optional[str] = None
    resolution: Optional[str] = None

    def __str__(self) -> str:
        components = [self.brief]

        if self.details:
            components.append(self.details)

        if self.resolution:
            components.append(self.resolution)

        return "\n".join(components)


class LayerSetupError(LayerError):
    """Base class for errors detected before a layer is processed."""


class ConfigurationError(LayerSetupError):
    """The layer configuration is missing or invalid.

    :param message: The error message.
    """

    def __init__(self, message: str):
        self.message = message
        brief = f"Invalid configuration: {message}."
        resolution = (
            "Set the root filesystem directory with CRAFT_LAYERS_ROOTFS "
            "or in the configuration file."
        )

        super().__init__(brief=brief, resolution=resolution)


class RootfsNotFound(LayerSetupError):
    """The root filesystem directory does not exist.

    :param path: The root filesystem path.
    """

    def __init__(self, path: str):
        self.path = path
        brief = f"Root filesystem directory {path!r} does not exist."
        resolution = "Make sure the root filesystem was created before applying layers."

        super().__init__(brief=brief, resolution=resolution)


class LayerArchiveNotFound(LayerSetupError):
    """The layer archive does not exist or is not a regular file.

    :param path: The layer archive path.
    """

    def __init__(self, path: str):
        self.path = path
        brief = f"Layer archive {path!r} does not exist."

        super().__init__(brief=brief)


class MalformedMarker(LayerError):
    """A whiteout marker entry could not be parsed.

    :param path: The marker entry path.
    :param message: The error message.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        brief = f"Malformed whiteout marker {path!r}: {message}."
        resolution = "The layer may be corrupt or incompatible."

        super().__init__(brief=brief, resolution=resolution)


class UnsafePath(LayerError):
    """A layer entry refers to a location outside the root filesystem.

    :param path: The offending entry path.
    """

    def __init__(self, path: str):
        self.path = path
        brief = f"Layer entry {path!r} points outside the root filesystem."
        resolution = "Make sure the layer comes from a trusted source."

        super().__init__(brief=brief, resolution=resolution)


class WhiteoutError(LayerError):
    """Failed to remove a whited out path.

    :param path: The path being removed.
    :param message: The error message.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        brief = f"Failed to remove {path!r}: {message}"
        resolution = "Make sure paths and permissions are correct."

        super().__init__(brief=brief, resolution=resolution)


class ArchiveReadError(LayerError):
    """Failed to open or read a layer archive.

    :param filename: The layer archive file name.
    :param message: The error message.
    """

    def __init__(self, filename: str, message: str):
        self.filename = filename
        self.message = message
        brief = f"Failed to read layer archive {filename!r}: {message}"

        super().__init__(brief=brief)


class ArchiveExtractionError(LayerError):
    """Failed to write a layer entry to disk.

    :param path: The entry path.
    :param message: The error message.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        brief = f"Failed to extract {path!r}: {message}"

        super().__init__(brief=brief)


class LayerPassError(LayerError):
    """A layer application pass failed.

    :param archive: The layer archive file name.
    :param pass_name: The name of the pass that failed.
    :param error: The error that interrupted the pass.
    """

    def __init__(self, *, archive: str, pass_name: str, error: LayerError):
        self.archive = archive
        self.pass_name = pass_name
        self.error = error
        brief = f"Failed to apply layer {archive!r}: {pass_name} pass failed."
        details = str(error)
        resolution = "Retry from a clean root filesystem."

        super().__init__(brief=brief, details=details, resolution=resolution)


class XAttributeError(LayerError):
    """Failed to write an extended attribute.

    :param key: The extended attribute key.
    :param path: The file path.
    """

    def __init__(self, key: str, path: str):
        self.key = key
        self.path = path
        brief = "Unable to write extended attribute."
        details = f"Failed to write attribute {key!r} on {path!r}."
        resolution = "Make sure your filesystem supports extended attributes."

        super().__init__(brief=brief, details=details, resolution=resolution)
