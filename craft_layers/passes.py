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

"""Layer archive passes.

A layer is applied with two scans of its archive. The whiteout pass removes
whited out files and opaque directories from the root filesystem, and the
extraction pass writes the layer contents. Running the scans in this order
ensures that a file deleted and recreated by the same layer ends up with the
new contents, regardless of the order of the entries in the archive.
"""

import abc
import logging
import tarfile
from pathlib import Path
from typing import Optional

from overrides import override

from craft_layers import archive, errors, mutations, whiteouts
from craft_layers.utils import os_utils, path_utils

logger = logging.getLogger(__name__)


class LayerPass(abc.ABC):
    """The base class for layer archive passes.

    :cvar name: The pass name, used in error reports.

    :param rootfs_dir: The absolute path of the root filesystem directory.
    """

    name: str

    def __init__(self, *, rootfs_dir: Path) -> None:
        self._rootfs_dir = rootfs_dir

    def run(self, tar: tarfile.TarFile) -> None:
        """Process every entry of an open layer archive.

        :param tar: The layer archive, positioned at its first entry.

        :raises LayerError: If the pass cannot be completed.
        """
        for member in archive.iter_entries(tar):
            self.process_entry(member)

        self.finish()

    @abc.abstractmethod
    def process_entry(self, member: tarfile.TarInfo) -> None:
        """Process a single archive entry."""

    def finish(self) -> None:
        """Complete the pass after the last entry was processed."""


class WhiteoutPass(LayerPass):
    """Apply the whiteout and opaque markers found in a layer."""

    name = "whiteout"

    def __init__(self, *, rootfs_dir: Path) -> None:
        super().__init__(rootfs_dir=rootfs_dir)
        self.markers_applied = 0

    @override
    def process_entry(self, member: tarfile.TarInfo) -> None:
        marker = whiteouts.classify(member.name)
        if marker.kind == whiteouts.MarkerKind.ORDINARY or marker.target is None:
            return

        path_utils.check_parent_in_root(self._rootfs_dir, marker.target)
        path = whiteouts.rootfs_path(self._rootfs_dir, marker.target)

        if marker.kind == whiteouts.MarkerKind.OPAQUE:
            logger.debug("opaque marker %s", member.name)
            mutations.apply_opaque(path, keep_dir=marker.target == ".")
        else:
            logger.debug("whiteout marker %s", member.name)
            mutations.apply_deletion(path)

        self.markers_applied += 1


class ExtractionPass(LayerPass):
    """Write the contents of a layer to the root filesystem.

    Whiteout markers, device files and fifos are not extracted.

    :param rootfs_dir: The absolute path of the root filesystem directory.
    :param numeric_owner: Use numeric user and group ids from the archive.
    :param preserve_xattrs: Restore extended attributes recorded in the archive.
    """

    name = "extraction"

    def __init__(
        self,
        *,
        rootfs_dir: Path,
        numeric_owner: bool = False,
        preserve_xattrs: bool = True,
    ) -> None:
        super().__init__(rootfs_dir=rootfs_dir)
        self._numeric_owner = numeric_owner
        self._preserve_xattrs = preserve_xattrs
        self._writer: Optional[archive.DiskWriter] = None
        self.entries_extracted = 0
        self.entries_skipped = 0
        self.warnings = 0

    @override
    def run(self, tar: tarfile.TarFile) -> None:
        # entry names are relative to the root filesystem
        with os_utils.working_directory(self._rootfs_dir):
            self._writer = archive.DiskWriter(
                tar,
                numeric_owner=self._numeric_owner,
                preserve_xattrs=self._preserve_xattrs,
            )
            super().run(tar)

    @override
    def process_entry(self, member: tarfile.TarInfo) -> None:
        if self._writer is None:
            raise RuntimeError("extraction pass is not running")

        if whiteouts.is_marker(member.name):
            logger.debug("skip whiteout marker %s", member.name)
            self.entries_skipped += 1
            return

        if archive.entry_type(member) in archive.DEVICE_TYPES:
            logger.debug("skip device or fifo %s", member.name)
            self.entries_skipped += 1
            return

        name = member.name
        try:
            self._writer.write_entry(member)
        except (tarfile.TarError, OSError, EOFError, errors.XAttributeError) as err:
            if archive.error_severity(err) == archive.Severity.FATAL:
                raise errors.ArchiveExtractionError(name, str(err)) from err
            self._warn(name, err)

        self.entries_extracted += 1

    @override
    def finish(self) -> None:
        if self._writer is None:
            return

        for member in self._writer.pending_directories():
            try:
                self._writer.restore_directory_attributes(member)
            except tarfile.ExtractError as err:
                self._warn(member.name, err)
            except OSError as err:
                raise errors.ArchiveExtractionError(member.name, str(err)) from err

    def _warn(self, name: str, err: Exception) -> None:
        logger.warning("Warning handling layer entry %s: %s", name, err)
        self.warnings += 1
