"""Tests for package discovery and local copies."""

from collections import namedtuple
from datetime import datetime

import psutil
import pytest

from package_backup.backup import local_backup
from package_backup.backup.local_backup import copy_package
from package_backup.backup.packages import (
    PackageRef,
    discover_packages,
    find_package,
    format_bytes,
    get_package_info,
)
from package_backup.core.errors import CopyError


def tree(root):
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


class TestCopyPackage:
    def test_copy_is_identical(self, package, tmp_path):
        out = tmp_path / "out"

        destination = copy_package(package.source_path, out, "nightly", "2026-10-19-14-30")

        assert destination == out / "nightly_2026-10-19-14-30"
        assert tree(destination) == tree(package.source_path)
        assert sorted(tree(destination)) == ["Runtime/Foo.cs", "package.json"]

    def test_new_timestamp_makes_a_sibling(self, package, tmp_path):
        out = tmp_path / "out"

        first = copy_package(package.source_path, out, "nightly", "2026-10-19-14-30")
        (package.source_path / "package.json").write_text("changed")
        second = copy_package(package.source_path, out, "nightly", "2026-10-19-14-31")

        assert first != second
        assert (first / "package.json").read_text() == '{"name": "foo", "version": "1.0.0"}'
        assert (second / "package.json").read_text() == "changed"

    def test_same_target_is_overwritten(self, package, tmp_path):
        out = tmp_path / "out"
        copy_package(package.source_path, out, "nightly", "2026-10-19-14-30")
        (package.source_path / "package.json").write_text("changed")

        destination = copy_package(package.source_path, out, "nightly", "2026-10-19-14-30")

        assert (destination / "package.json").read_text() == "changed"

    def test_missing_source(self, tmp_path):
        with pytest.raises(CopyError):
            copy_package(tmp_path / "nope", tmp_path / "out", "nightly", "2026-10-19-14-30")

    def test_missing_name(self, package, tmp_path):
        with pytest.raises(CopyError):
            copy_package(package.source_path, tmp_path / "out", "", "2026-10-19-14-30")

    def test_insufficient_space(self, package, tmp_path, monkeypatch):
        usage = namedtuple("usage", "total used free percent")
        monkeypatch.setattr(psutil, "disk_usage", lambda path: usage(100, 100, 0, 100.0))

        with pytest.raises(CopyError, match="Insufficient space"):
            copy_package(package.source_path, tmp_path / "out", "nightly", "2026-10-19-14-30")

        assert not (tmp_path / "out").exists()

    def test_home_relative_destination_checks_home_volume(self, package, tmp_path, monkeypatch):
        home = tmp_path / "home"
        home.mkdir()
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setenv("USERPROFILE", str(home))
        checked = []
        usage = namedtuple("usage", "total used free percent")

        def disk_usage(path):
            checked.append(path)
            return usage(10**12, 0, 10**12, 0.0)

        monkeypatch.setattr(psutil, "disk_usage", disk_usage)

        destination = copy_package(package.source_path, "~/backups", "nightly", "2026-10-19-14-30")

        assert destination == home / "backups" / "nightly_2026-10-19-14-30"
        assert checked == [str(home)]

    def test_io_error_becomes_copy_error(self, package, tmp_path, monkeypatch):
        def broken_copytree(*args, **kwargs):
            raise PermissionError("denied")

        monkeypatch.setattr(local_backup.shutil, "copytree", broken_copytree)

        with pytest.raises(CopyError, match="denied"):
            copy_package(package.source_path, tmp_path / "out", "nightly", "2026-10-19-14-30")


class TestPackages:
    def test_discovery_skips_hidden_and_files(self, tmp_path):
        cache = tmp_path / "PackageCache"
        for name in ("com.b.tools", "com.a.core", ".staging"):
            (cache / name).mkdir(parents=True)
        (cache / "readme.txt").write_text("x")

        names = [p.name for p in discover_packages(cache)]

        assert names == ["com.a.core", "com.b.tools"]

    def test_missing_cache_dir(self, tmp_path):
        assert discover_packages(tmp_path / "missing") == []

    def test_find_package(self, package):
        cache = package.source_path.parent

        assert find_package(cache, "foo") == package
        assert find_package(cache, "bar") is None

    def test_package_info(self, package):
        info = get_package_info(package)

        assert info.size_bytes == len('{"name": "foo", "version": "1.0.0"}') + len(b"public class Foo {}\n\x00\xff")
        assert isinstance(info.last_modified, datetime)

    def test_package_ref_is_immutable(self, package):
        with pytest.raises(AttributeError):
            package.name = "bar"


@pytest.mark.parametrize("size, expected", [
    (0, "0 B"),
    (512, "512 B"),
    (1536, "1.5 KB"),
    (5 * 1024 ** 2, "5 MB"),
    (3 * 1024 ** 4, "3072 GB"),
])
def test_format_bytes(size, expected):
    assert format_bytes(size) == expected
