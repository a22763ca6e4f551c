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

import io
import os
import tarfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

LAYER_MTIME = 1_600_000_000


class LayerBuilder:
    """Create layer archives entry by entry."""

    mtime = LAYER_MTIME

    def __init__(self, path: Path) -> None:
        self.path = path
        self._entries: List[tuple] = []

    def add_file(
        self,
        name: str,
        data: bytes = b"",
        *,
        mode: int = 0o644,
        pax_headers: Optional[Dict[str, str]] = None,
    ) -> "LayerBuilder":
        info = self._info(name, tarfile.REGTYPE, mode)
        info.size = len(data)
        if pax_headers:
            info.pax_headers = pax_headers
        self._entries.append((info, data))
        return self

    def add_dir(self, name: str, *, mode: int = 0o755) -> "LayerBuilder":
        self._entries.append((self._info(name, tarfile.DIRTYPE, mode), None))
        return self

    def add_symlink(self, name: str, target: str) -> "LayerBuilder":
        info = self._info(name, tarfile.SYMTYPE, 0o777)
        info.linkname = target
        self._entries.append((info, None))
        return self

    def add_hardlink(
        self, name: str, target: str, *, mode: int = 0o644
    ) -> "LayerBuilder":
        info = self._info(name, tarfile.LNKTYPE, mode)
        info.linkname = target
        self._entries.append((info, None))
        return self

    def add_special(self, name: str, entry_type: bytes) -> "LayerBuilder":
        info = self._info(name, entry_type, 0o644)
        info.devmajor = 1
        info.devminor = 3
        self._entries.append((info, None))
        return self

    def add_whiteout(self, name: str) -> "LayerBuilder":
        head, sep, tail = name.rpartition("/")
        return self.add_file(f"{head}{sep}.wh.{tail}")

    def add_opaque(self, directory: str) -> "LayerBuilder":
        return self.add_file(f"{directory}/.wh..wh..opq")

    def build(self, compression: str = "") -> Path:
        mode = f"w:{compression}" if compression else "w"
        with tarfile.open(self.path, mode, format=tarfile.PAX_FORMAT) as tar:
            for info, data in self._entries:
                fileobj = io.BytesIO(data) if data is not None else None
                tar.addfile(info, fileobj)
        return self.path

    @staticmethod
    def _info(name: str, entry_type: bytes, mode: int) -> tarfile.TarInfo:
        info = tarfile.TarInfo(name)
        info.type = entry_type
        info.mode = mode
        info.mtime = LAYER_MTIME
        info.uid = os.getuid()
        info.gid = os.getgid()
        return info


@pytest.fixture
def new_dir(monkeypatch, tmpdir):
    """Change to a new temporary directory."""
    monkeypatch.chdir(tmpdir)
    return tmpdir


@pytest.fixture
def new_path(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def rootfs(tmp_path) -> Path:
    """An empty root filesystem directory."""
    path = tmp_path / "rootfs"
    path.mkdir()
    return path


@pytest.fixture
def layer_factory(tmp_path):
    """Return a function creating layer builders in the temporary directory."""

    def factory(name: str = "layer.tar") -> LayerBuilder:
        return LayerBuilder(tmp_path / name)

    return factory


@pytest.fixture
def layer(layer_factory) -> LayerBuilder:
    """A builder for a layer archive named layer.tar."""
    return layer_factory()
