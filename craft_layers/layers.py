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

"""Apply container image layers to a root filesystem."""

import dataclasses
import logging
import os
from pathlib import Path
from typing import Union

from craft_layers import archive, errors, passes
from craft_layers.config import LayerConfig

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class LayerReport:
    """Summary of a successful layer application.

    :param archive: The layer archive file.
    :param markers_applied: The number of whiteout and opaque markers applied.
    :param entries_extracted: The number of entries written to disk.
    :param entries_skipped: The number of markers, devices and fifos not written.
    :param warnings: The number of entries written with degraded metadata.
    """

    archive: str
    markers_applied: int
    entries_extracted: int
    entries_skipped: int
    warnings: int


def apply_layer(archive_path: Union[Path, str], config: LayerConfig) -> LayerReport:
    """Apply a layer archive to the configured root filesystem.

    Whiteouts are applied in a first scan of the archive. The archive is then
    reopened and its contents are extracted. A failed application may leave
    the root filesystem partially modified.

    :param archive_path: The layer archive file.
    :param config: The layer settings.

    :returns: A summary of the changes made.

    :raises RootfsNotFound: If the root filesystem directory does not exist.
    :raises LayerArchiveNotFound: If the archive is not a regular file.
    :raises LayerPassError: If a pass over the archive failed.
    """
    archive_path = Path(os.path.abspath(archive_path))
    rootfs_dir = Path(os.path.abspath(config.rootfs_dir))

    _check_preconditions(archive_path, rootfs_dir)

    logger.debug("Applying whiteouts for layer %s", archive_path)
    whiteout_pass = passes.WhiteoutPass(rootfs_dir=rootfs_dir)
    _run_pass(whiteout_pass, archive_path, block_size=config.block_size)

    logger.debug("Extracting layer %s", archive_path)
    extraction_pass = passes.ExtractionPass(
        rootfs_dir=rootfs_dir,
        numeric_owner=config.numeric_owner,
        preserve_xattrs=config.preserve_xattrs,
    )
    _run_pass(extraction_pass, archive_path, block_size=config.block_size)

    report = LayerReport(
        archive=str(archive_path),
        markers_applied=whiteout_pass.markers_applied,
        entries_extracted=extraction_pass.entries_extracted,
        entries_skipped=extraction_pass.entries_skipped,
        warnings=extraction_pass.warnings,
    )
    logger.debug("layer applied: %s", report)

    return report


def _check_preconditions(archive_path: Path, rootfs_dir: Path) -> None:
    if not rootfs_dir.is_dir():
        raise errors.RootfsNotFound(str(rootfs_dir))

    if not archive_path.is_file():
        raise errors.LayerArchiveNotFound(str(archive_path))


def _run_pass(
    layer_pass: passes.LayerPass, archive_path: Path, *, block_size: int
) -> None:
    try:
        with archive.open_layer(archive_path, block_size=block_size) as tar:
            layer_pass.run(tar)
    except errors.LayerError as err:
        raise errors.LayerPassError(
            archive=str(archive_path), pass_name=layer_pass.name, error=err
        ) from err
