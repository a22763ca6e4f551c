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

"""Utility functions for layer-relative paths."""

import os
import posixpath
import re
from pathlib import Path
from typing import Union

from craft_layers import errors

# leading '/' or './' components, as many as present
_LEADING_ROOT_REGEX = re.compile(r"^(\.?/)+")


def normalize_layer_path(path: str) -> str:
    """Normalize a path recorded in a layer archive.

    Leading slashes and ``./`` components are removed and the result is
    normalized lexically. Symbolic links are not resolved.

    :param path: The layer-relative path.

    :returns: The normalized path, or "." if it designates the root.

    :raises UnsafePath: If the path climbs above the root.
    """
    stripped = _LEADING_ROOT_REGEX.sub("", path)
    if not stripped:
        return "."

    normalized = posixpath.normpath(stripped)
    if normalized == ".." or normalized.startswith("../"):
        raise errors.UnsafePath(path)

    return normalized


def check_parent_in_root(root_dir: Union[Path, str], path: str) -> None:
    """Verify that the directory holding a layer path resolves inside the root.

    Symbolic links in the parent components are followed, the final
    component is not.

    :param root_dir: The root filesystem directory.
    :param path: The normalized layer-relative path.

    :raises UnsafePath: If a parent component leads outside the root.
    """
    root = os.path.realpath(root_dir)
    parent = os.path.realpath(os.path.join(root, posixpath.dirname(path)))

    if os.path.commonpath([root, parent]) != root:
        raise errors.UnsafePath(path)
