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

import logging
import sys

import craft_layers
import pytest
from craft_layers import errors, main


@pytest.fixture(autouse=True)
def no_config_file(mocker):
    mocker.patch(
        "craft_layers.config.BaseDirectory.load_first_config", return_value=None
    )


@pytest.fixture
def rootfs_env(monkeypatch, rootfs):
    monkeypatch.setenv("CRAFT_LAYERS_ROOTFS", str(rootfs))
    return rootfs


def _run(monkeypatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["craft-layers", *args])
    main.main()


def test_apply_layer(monkeypatch, layer, rootfs_env):
    path = layer.add_file("hello", b"hello").build()

    _run(monkeypatch, str(path))

    assert (rootfs_env / "hello").read_bytes() == b"hello"


def test_version(monkeypatch, capsys):
    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, "--version")

    assert raised.value.code is None
    assert capsys.readouterr().out == f"craft-layers {craft_layers.__version__}\n"


def test_missing_layer(monkeypatch, capsys, rootfs_env):
    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch)

    assert raised.value.code == 2
    assert capsys.readouterr().err == (
        "Error: provide a single layer archive to apply.\n"
    )


def test_too_many_layers(monkeypatch, layer_factory, rootfs_env):
    first = layer_factory("a.tar").build()
    second = layer_factory("b.tar").build()

    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, str(first), str(second))

    assert raised.value.code == 2


def test_rootfs_not_configured(monkeypatch, capsys, layer):
    monkeypatch.delenv("CRAFT_LAYERS_ROOTFS", raising=False)
    path = layer.build()

    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, str(path))

    assert raised.value.code == 3
    assert capsys.readouterr().err.startswith(
        "Error: Invalid configuration: root filesystem directory is not set."
    )


def test_rootfs_not_found(monkeypatch, tmp_path, layer):
    monkeypatch.setenv("CRAFT_LAYERS_ROOTFS", str(tmp_path / "missing"))
    path = layer.build()

    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, str(path))

    assert raised.value.code == 3


def test_layer_not_found(monkeypatch, tmp_path, rootfs_env):
    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, str(tmp_path / "missing.tar"))

    assert raised.value.code == 3


def test_layer_error(monkeypatch, capsys, layer, rootfs_env):
    path = layer.add_file(".wh..wh..opq").build()

    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, str(path))

    assert raised.value.code == 4
    err = capsys.readouterr().err
    assert err.startswith(f"Error: Failed to apply layer {str(path)!r}")
    assert "Malformed whiteout marker '.wh..wh..opq'" in err


def test_hardlink_target_missing(monkeypatch, capsys, layer, rootfs_env):
    path = layer.add_hardlink("link", "missing").build()

    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, str(path))

    assert raised.value.code == 4
    assert "hard link target 'missing' not found" in capsys.readouterr().err


def test_os_error(monkeypatch, capsys, mocker, layer, rootfs_env):
    mocker.patch(
        "craft_layers.layers.apply_layer",
        side_effect=PermissionError(13, "Permission denied", "/rootfs/etc"),
    )
    path = layer.build()

    with pytest.raises(SystemExit) as raised:
        _run(monkeypatch, str(path))

    assert raised.value.code == 1
    assert capsys.readouterr().err == "Error: /rootfs/etc: Permission denied.\n"


def test_warnings_reported(monkeypatch, mocker, caplog, layer, rootfs_env):
    mocker.patch(
        "craft_layers.archive.DiskWriter.write_entry",
        side_effect=errors.XAttributeError(key="security.capability", path="a"),
    )
    path = layer.add_file("a").build()
    caplog.set_level(logging.WARNING)

    _run(monkeypatch, str(path))

    assert "Layer applied with 1 warning(s), see messages above." in caplog.text
