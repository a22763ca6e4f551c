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

from pathlib import Path

import pytest
from craft_layers import errors, whiteouts
from craft_layers.whiteouts import Marker, MarkerKind


class TestClassify:
    """Whiteout marker classification."""

    @pytest.mark.parametrize(
        "path",
        [
            "usr/bin/ls",
            "etc",
            "./etc/hosts",
            "usr/share/doc/foo.wh.bar",
            "usr/share/wh.foo",
            ".whatever",
        ],
    )
    def test_ordinary(self, path):
        assert whiteouts.classify(path) == Marker(MarkerKind.ORDINARY, path)

    @pytest.mark.parametrize(
        ("path", "target"),
        [
            ("usr/share/doc/test/.wh..wh..opq", "usr/share/doc/test"),
            ("./usr/.wh..wh..opq", "usr"),
            ("/usr/lib/.wh..wh..opq", "usr/lib"),
            ("./.wh..wh..opq", "."),
            ("dir/.wh..wh..opq/", "dir"),
        ],
    )
    def test_opaque(self, path, target):
        assert whiteouts.classify(path) == Marker(MarkerKind.OPAQUE, path, target)

    @pytest.mark.parametrize(
        ("path", "target"),
        [
            ("usr/share/doc/test/.wh.deletedfile", "usr/share/doc/test/deletedfile"),
            (".wh.foo", "foo"),
            ("./.wh.foo", "foo"),
            ("a/.wh..hidden", "a/.hidden"),
            ("a/.wh..wh.foo", "a/.wh.foo"),
            ("a.wh.b/.wh.c", "a.wh.b/c"),
        ],
    )
    def test_deletion(self, path, target):
        assert whiteouts.classify(path) == Marker(MarkerKind.DELETION, path, target)

    def test_opaque_without_directory(self):
        with pytest.raises(errors.MalformedMarker) as raised:
            whiteouts.classify(".wh..wh..opq")
        assert raised.value.path == ".wh..wh..opq"
        assert raised.value.message == "no containing directory"

    @pytest.mark.parametrize(
        "path", ["usr/.wh.foo/bar", ".wh.dir/.wh..wh..opq", "a/.wh..wh..opq/b"]
    )
    def test_marker_in_parent(self, path):
        with pytest.raises(errors.MalformedMarker) as raised:
            whiteouts.classify(path)
        assert raised.value.message == "whiteout prefix in a parent directory"

    @pytest.mark.parametrize("path", ["dir/.wh.", ".wh..", "dir/.wh..."])
    def test_deletion_without_name(self, path):
        with pytest.raises(errors.MalformedMarker) as raised:
            whiteouts.classify(path)
        assert raised.value.message == "invalid whited out name"

    @pytest.mark.parametrize(
        "path", ["../.wh.etc", "a/../../.wh.etc", "../../.wh..wh..opq"]
    )
    def test_marker_outside_root(self, path):
        with pytest.raises(errors.UnsafePath):
            whiteouts.classify(path)


class TestResolvers:
    """Marker target resolution."""

    def test_resolve_opaque_target(self):
        assert (
            whiteouts.resolve_opaque_target("usr/share/doc/test/.wh..wh..opq")
            == "usr/share/doc/test"
        )

    def test_resolve_opaque_target_no_directory(self):
        with pytest.raises(errors.MalformedMarker):
            whiteouts.resolve_opaque_target(".wh..wh..opq")

    def test_resolve_deletion_target(self):
        assert (
            whiteouts.resolve_deletion_target("usr/share/doc/test/.wh.deletedfile")
            == "usr/share/doc/test/deletedfile"
        )

    def test_resolve_deletion_target_no_token(self):
        with pytest.raises(errors.MalformedMarker) as raised:
            whiteouts.resolve_deletion_target("usr/share/doc/file")
        assert raised.value.message == "missing whiteout prefix"

    @pytest.mark.parametrize(
        ("target", "result"), [("usr/bin", "/rootfs/usr/bin"), (".", "/rootfs")]
    )
    def test_rootfs_path(self, target, result):
        assert whiteouts.rootfs_path(Path("/rootfs"), target) == Path(result)


@pytest.mark.parametrize(
    ("path", "result"),
    [
        ("usr/bin/ls", False),
        ("usr/foo.wh.bar", False),
        ("usr/.wh.bar", True),
        (".wh..wh..opq", True),
        ("a/.wh.b/c", True),
    ],
)
def test_is_marker(path, result):
    assert whiteouts.is_marker(path) is result
