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

"""OCI whiteout marker parsing.

Relevant OCI documentation available at:
https://github.com/opencontainers/image-spec/blob/main/layer.md#whiteouts
"""

import dataclasses
import enum
import logging
from pathlib import Path
from typing import Optional

from craft_layers import errors
from craft_layers.utils import path_utils

logger = logging.getLogger(__name__)

WHITEOUT_PREFIX = ".wh."
OPAQUE_MARKER = ".wh..wh..opq"


class MarkerKind(enum.Enum):
    """The role of a layer entry with respect to whiteouts."""

    ORDINARY = "ordinary"
    DELETION = "deletion"
    OPAQUE = "opaque"


@dataclasses.dataclass(frozen=True)
class Marker:
    """A classified layer entry path.

    :param kind: The entry role.
    :param path: The path as recorded in the layer.
    :param target: The normalized layer-relative path affected by the
        marker, or None for ordinary entries.
    """

    kind: MarkerKind
    path: str
    target: Optional[str] = None


def is_marker(path: str) -> bool:
    """Verify if any element of the given path is a whiteout marker name.

    :param path: The layer entry path.

    :returns: Whether the path must never be written to disk.
    """
    return any(part.startswith(WHITEOUT_PREFIX) for part in path.split("/"))


def classify(path: str) -> Marker:
    """Determine whether a layer entry is an opaque marker, a whiteout or neither.

    :param path: The layer entry path.

    :returns: The classified entry.

    :raises MalformedMarker: If the path carries a marker name that cannot
        be resolved.
    :raises UnsafePath: If the marker target is outside the root.
    """
    parts = path.rstrip("/").split("/")
    name = parts[-1]

    if any(part.startswith(WHITEOUT_PREFIX) for part in parts[:-1]):
        raise errors.MalformedMarker(path, "whiteout prefix in a parent directory")

    if name == OPAQUE_MARKER:
        target = path_utils.normalize_layer_path(resolve_opaque_target(path))
        return Marker(MarkerKind.OPAQUE, path, target)

    if name.startswith(WHITEOUT_PREFIX):
        target = path_utils.normalize_layer_path(resolve_deletion_target(path))
        return Marker(MarkerKind.DELETION, path, target)

    return Marker(MarkerKind.ORDINARY, path)


def resolve_opaque_target(marker_path: str) -> str:
    """Find the directory made opaque by an opaque marker.

    :param marker_path: The opaque marker path, e.g. ``usr/share/doc/.wh..wh..opq``.

    :returns: The directory containing the marker.

    :raises MalformedMarker: If the marker path has no directory component.
    """
    directory, sep, _ = marker_path.rstrip("/").rpartition("/")
    if not sep:
        raise errors.MalformedMarker(marker_path, "no containing directory")

    return directory


def resolve_deletion_target(marker_path: str) -> str:
    """Find the file whited out by a whiteout marker.

    :param marker_path: The whiteout marker path, e.g. ``usr/share/.wh.foo``.

    :returns: The marker path with the whiteout prefix removed.

    :raises MalformedMarker: If the marker path does not name a whiteout.
    """
    directory, sep, name = marker_path.rstrip("/").rpartition("/")
    if not name.startswith(WHITEOUT_PREFIX):
        raise errors.MalformedMarker(marker_path, "missing whiteout prefix")

    target_name = name[len(WHITEOUT_PREFIX) :]
    if target_name in ("", ".", ".."):
        raise errors.MalformedMarker(marker_path, "invalid whited out name")

    return directory + sep + target_name


def rootfs_path(rootfs_dir: Path, target: str) -> Path:
    """Locate a layer-relative target in the root filesystem.

    :param rootfs_dir: The root filesystem directory.
    :param target: The normalized layer-relative path.

    :returns: The target path under the root filesystem.
    """
    return rootfs_dir / target
