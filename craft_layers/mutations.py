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

"""Apply whiteout markers to a root filesystem."""

import logging
from pathlib import Path

from craft_layers import errors
from craft_layers.utils import file_utils

logger = logging.getLogger(__name__)


def apply_opaque(path: Path, *, keep_dir: bool = False) -> None:
    """Discard the previous contents of a directory made opaque by a layer.

    The directory is removed so that entries from the same layer recreate it
    empty. Missing paths and paths that are not directories are ignored.

    :param path: The absolute path of the opaque directory.
    :param keep_dir: Remove the directory contents but keep the directory
        itself. Used when the opaque directory is the root filesystem.

    :raises WhiteoutError: If the directory cannot be removed.
    """
    if not file_utils.is_real_dir(path):
        logger.debug("opaque directory %s not present", path)
        return

    logger.debug("make directory opaque: %s", path)
    try:
        if keep_dir:
            file_utils.clear_directory(path)
        else:
            file_utils.remove_path(path)
    except OSError as err:
        raise errors.WhiteoutError(str(path), message=str(err)) from err


def apply_deletion(path: Path) -> None:
    """Remove a file or directory whited out by a layer.

    :param path: The absolute path of the whited out file.

    :raises WhiteoutError: If the path exists and cannot be removed.
    """
    try:
        removed = file_utils.remove_path(path)
    except OSError as err:
        raise errors.WhiteoutError(str(path), message=str(err)) from err

    if removed:
        logger.debug("removed whited out path: %s", path)
    else:
        logger.debug("whited out path %s not present", path)
