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

from . import errors
from .config import LayerConfig, load_config
from .errors import LayerError
from .layers import LayerReport, apply_layer
from .whiteouts import Marker, MarkerKind, classify

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("craft-layers")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "dev"


__all__ = [
    "__version__",
    "errors",
    "LayerConfig",
    "LayerError",
    "LayerReport",
    "Marker",
    "MarkerKind",
    "apply_layer",
    "classify",
    "load_config",
]
