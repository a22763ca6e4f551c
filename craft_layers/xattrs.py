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

"""Helpers to restore filesystem extended attributes recorded in layers."""

import logging
import os
import sys
import tarfile
from typing import Dict

from craft_layers import errors

logger = logging.getLogger(__name__)

# PAX record prefix used by GNU tar, bsdtar and container tooling. POSIX
# ACLs travel as the system.posix_acl_access and system.posix_acl_default
# attributes.
XATTR_PAX_PREFIX = "SCHILY.xattr."


def pax_xattrs(member: tarfile.TarInfo) -> Dict[str, bytes]:
    """List the extended attributes recorded for an archive entry.

    :param member: The archive entry.

    :return: A dictionary mapping attribute keys to raw values.
    """
    attrs: Dict[str, bytes] = {}

    for keyword, value in member.pax_headers.items():
        if not keyword.startswith(XATTR_PAX_PREFIX):
            continue
        key = keyword[len(XATTR_PAX_PREFIX) :]
        # tarfile decodes non-name PAX values as utf-8 with surrogateescape
        attrs[key] = value.encode("utf-8", "surrogateescape")

    return attrs


def write_xattr(path: str, key: str, value: bytes) -> None:
    """Set an extended attribute on a file.

    :param path: The file to add the attribute to.
    :param key: The full attribute key, including its namespace.
    :param value: The raw attribute value.

    :raises XAttributeError: If the attribute cannot be written.
    """
    if sys.platform != "linux":
        raise RuntimeError("xattr support only available for Linux")

    # Extended attributes do not apply to symlinks.
    if os.path.islink(path):
        return

    try:
        os.setxattr(path, key, value)
    except OSError as error:
        raise errors.XAttributeError(key=key, path=path) from error
