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

"""Utilities related to the operating system."""

import contextlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def working_directory(path: Union[Path, str]) -> Iterator[None]:
    """Change the process working directory for the duration of a context.

    The previous working directory is restored on every exit path, including
    when an exception is raised inside the context.

    :param path: The directory to change to.
    """
    previous = os.getcwd()
    logger.debug("change working directory to %s", path)
    os.chdir(path)
    try:
        yield
    finally:
        logger.debug("restore working directory to %s", previous)
        os.chdir(previous)
