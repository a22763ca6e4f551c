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

"""Layer archive reading and writing.

The archive engine is :mod:`tarfile`. Layers are read in stream mode so each
pass is a single forward scan, and compression is detected automatically.
"""

import contextlib
import enum
import logging
import os
import sys
import tarfile
from collections.abc import Iterator
from pathlib import Path
from typing import Dict, List

from craft_layers import errors, xattrs
from craft_layers.utils import file_utils, path_utils

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = tarfile.RECORDSIZE

_FFLAGS_PAX_KEYWORD = "SCHILY.fflags"


class EntryType(enum.Enum):
    """The file type of an archive entry."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    CHAR_DEVICE = "char-device"
    BLOCK_DEVICE = "block-device"
    FIFO = "fifo"


# Entry types that are never written to a layered root filesystem.
DEVICE_TYPES = frozenset(
    {EntryType.CHAR_DEVICE, EntryType.BLOCK_DEVICE, EntryType.FIFO}
)


class Severity(enum.Enum):
    """How a problem found while processing an entry affects the archive."""

    WARNING = "warning"
    FATAL = "fatal"


def entry_type(member: tarfile.TarInfo) -> EntryType:
    """Determine the file type of an archive entry.

    Unknown tar type flags are treated as regular files.

    :param member: The archive entry.

    :returns: The entry file type.
    """
    if member.isdir():
        return EntryType.DIRECTORY
    if member.issym():
        return EntryType.SYMLINK
    if member.islnk():
        return EntryType.HARDLINK
    if member.ischr():
        return EntryType.CHAR_DEVICE
    if member.isblk():
        return EntryType.BLOCK_DEVICE
    if member.isfifo():
        return EntryType.FIFO

    return EntryType.REGULAR


def error_severity(err: Exception) -> Severity:
    """Determine whether an entry write error affects the rest of the archive.

    :param err: The error raised while writing an entry.

    :returns: ``Severity.WARNING`` if only the entry metadata was degraded,
        ``Severity.FATAL`` otherwise.
    """
    if isinstance(err, (tarfile.ExtractError, errors.XAttributeError)):
        return Severity.WARNING

    return Severity.FATAL


@contextlib.contextmanager
def open_layer(
    path: Path, *, block_size: int = DEFAULT_BLOCK_SIZE
) -> Iterator[tarfile.TarFile]:
    """Open a layer archive for a single forward scan.

    The archive is closed when the context exits, including on error.

    :param path: The layer archive file.
    :param block_size: The size of the blocks read from the file.

    :raises ArchiveReadError: If the archive cannot be opened.
    """
    logger.debug("open layer archive %s (block size %d)", path, block_size)
    try:
        tar = tarfile.open(path, mode="r|*", bufsize=block_size, errorlevel=2)
    except (tarfile.TarError, OSError, EOFError) as err:
        raise errors.ArchiveReadError(str(path), str(err)) from err

    try:
        yield tar
    finally:
        tar.close()


def iter_entries(tar: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
    """Iterate over archive entries in stream order.

    Entries are not retained by the archive object, so memory use does not
    grow with the number of entries in the layer.

    :param tar: The open layer archive.

    :raises ArchiveReadError: If an entry header cannot be read.
    """
    while True:
        try:
            member = tar.next()
        except (tarfile.TarError, OSError, EOFError) as err:
            raise errors.ArchiveReadError(str(tar.name), str(err)) from err

        if member is None:
            return

        # tarfile keeps every member read, even in stream mode
        tar.members = []
        yield member


class DiskWriter:
    """Write archive entries to the current working directory.

    Entries are written one at a time while the archive is scanned. As in
    :meth:`tarfile.TarFile.extractall`, directory attributes are restored
    only after all entries were written, so that creating files does not
    change directory timestamps and read-only directories can be populated.

    The working directory at the time the writer is created is the root of
    the extracted tree. No entry is written through a symbolic link leading
    outside of it.

    :param tar: The open layer archive.
    :param numeric_owner: Use the numeric user and group ids recorded in the
        archive instead of looking up user and group names.
    :param preserve_xattrs: Restore extended attributes (including POSIX
        ACLs) recorded in the archive.
    """

    def __init__(
        self,
        tar: tarfile.TarFile,
        *,
        numeric_owner: bool = False,
        preserve_xattrs: bool = True,
    ) -> None:
        self._tar = tar
        self._numeric_owner = numeric_owner
        self._preserve_xattrs = preserve_xattrs and sys.platform == "linux"
        self._directories: Dict[str, tarfile.TarInfo] = {}
        self._root_dir = os.getcwd()

    def write_entry(self, member: tarfile.TarInfo) -> None:
        """Write an archive entry and its payload.

        Whatever occupies the destination is replaced, unless both the
        existing file and the entry are directories. Parent components that
        exist but are not directories are replaced too.

        :param member: The archive entry, which must be the entry most
            recently read from the archive.

        :raises UnsafePath: If the entry points outside the working directory.
        :raises ArchiveExtractionError: If a hard link target does not exist.
        :raises tarfile.ExtractError: If entry metadata could not be restored.
        :raises XAttributeError: If an extended attribute could not be restored.
        :raises OSError: If the entry could not be written.
        """
        member.name = path_utils.normalize_layer_path(member.name)
        if member.islnk():
            member.linkname = path_utils.normalize_layer_path(member.linkname)

        if member.name == "." and not member.isdir():
            raise errors.UnsafePath(member.name)

        self._clear_parents(member.name)

        if member.islnk():
            path_utils.check_parent_in_root(self._root_dir, member.linkname)
            if not os.path.exists(member.linkname):
                raise errors.ArchiveExtractionError(
                    member.name, f"hard link target {member.linkname!r} not found"
                )

        _clear_destination(member)

        is_dir = member.isdir()
        logger.debug("extract %s (%s)", member.name, entry_type(member).value)
        self._tar.extract(
            member,
            path="",
            set_attrs=not is_dir,
            numeric_owner=self._numeric_owner,
            filter="fully_trusted",
        )

        if is_dir:
            self._directories[member.name] = member

        if _FFLAGS_PAX_KEYWORD in member.pax_headers:
            logger.debug("filesystem flags not restored on %s", member.name)

        if self._preserve_xattrs:
            for key, value in xattrs.pax_xattrs(member).items():
                xattrs.write_xattr(member.name, key, value)

    def _clear_parents(self, name: str) -> None:
        """Replace the non-directory components leading to an entry."""
        parts = name.split("/")

        for index in range(1, len(parts)):
            parent = "/".join(parts[:index])
            path_utils.check_parent_in_root(self._root_dir, parent)
            if os.path.lexists(parent) and not os.path.isdir(parent):
                logger.debug("replace existing %s", parent)
                file_utils.remove_path(Path(parent))

        path_utils.check_parent_in_root(self._root_dir, name)

    def pending_directories(self) -> List[tarfile.TarInfo]:
        """List directories with deferred attributes, deepest first."""
        return [
            self._directories[name]
            for name in sorted(self._directories, reverse=True)
        ]

    def restore_directory_attributes(self, member: tarfile.TarInfo) -> None:
        """Restore the ownership, timestamps and mode of a directory entry.

        :param member: The directory entry.

        :raises tarfile.ExtractError: If an attribute could not be restored.
        """
        try:
            path_utils.check_parent_in_root(self._root_dir, member.name)
        except errors.UnsafePath:
            logger.debug("directory %s moved outside the root", member.name)
            return

        if not file_utils.is_real_dir(Path(member.name)):
            # replaced by a later entry of the same layer
            return

        self._tar.chown(member, member.name, self._numeric_owner)
        self._tar.utime(member, member.name)
        self._tar.chmod(member, member.name)


def _clear_destination(member: tarfile.TarInfo) -> None:
    """Remove the file that would prevent an entry from being written."""
    path = Path(member.name)

    if member.name == "." or not os.path.lexists(path):
        return

    if member.isdir() and file_utils.is_real_dir(path):
        return

    logger.debug("replace existing %s", path)
    file_utils.remove_path(path)
