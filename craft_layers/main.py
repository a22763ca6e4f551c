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

"""Layer application command line tool.

This is the main entry point for the craft_layers package, invoked when
running `python -mcraft_layers` or `craft-layers`. It applies a single layer
archive to the root filesystem set in the configuration.
"""

import argparse
import logging
import sys

import craft_layers
from craft_layers import config, errors, layers

logger = logging.getLogger(__name__)


def main():
    """Run the command-line interface."""
    options = _parse_arguments()

    if options.version:
        print(f"craft-layers {craft_layers.__version__}")
        sys.exit()

    if options.trace:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logging.basicConfig(level=log_level)

    if options.layer is None:
        print("Error: provide a single layer archive to apply.", file=sys.stderr)
        sys.exit(2)

    try:
        layer_config = config.load_config()
        report = layers.apply_layer(options.layer, layer_config)
    except OSError as err:
        msg = err.strerror
        if err.filename:
            msg = f"{err.filename}: {msg}"
        print(f"Error: {msg}.", file=sys.stderr)
        sys.exit(1)
    except errors.LayerSetupError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(3)
    except errors.LayerError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(4)

    if report.warnings:
        logger.warning(
            "Layer applied with %d warning(s), see messages above.", report.warnings
        )


def _parse_arguments() -> argparse.Namespace:
    prog = "craft-layers"
    description = (
        "Apply a container image layer to the root filesystem set in "
        f"{config.ROOTFS_ENV}, honoring OCI whiteouts."
    )

    parser = argparse.ArgumentParser(prog=prog, description=description, add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit.",
    )
    parser.add_argument(
        "layer",
        metavar="layer-archive",
        nargs="?",
        help="The layer archive to apply.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable debug messages.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Display the craft-layers version and exit.",
    )

    return parser.parse_args()
