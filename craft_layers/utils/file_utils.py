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

"""File-related utilities."""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def is_real_dir(path: Path) -> bool:
    """Verify if the given path is a directory and not a symlink to one."""
    return path.is_dir() and not path.is_symlink()


def remove_path(path: Path) -> bool:
    """Remove a file or directory tree.

    Directories are removed recursively, anything else (including symbolic
    links to directories) is unlinked.

    :param path: The path to remove.

    :returns: Whether something was removed.

    :raises OSError: If removal fails for any reason other than the path
        not existing.
    """
    if not os.path.lexists(path):
        return False

    if is_real_dir(path):
        shutil.rmtree(path)
    else:
        path.unlink()

    return True


def clear_directory(path: Path) -> None:
    """Remove the contents of a directory, keeping the directory itself.

    :param path: The directory to empty.

    :raises OSError: If an entry cannot be removed.
    """
    for child in path.iterdir():
        remove_path(child)
