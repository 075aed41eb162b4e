"""Tests for platform identification helpers."""

import os
import stat
import sys

import pytest

from kitsub.tools import runtime
from kitsub.tools.runtime import (
    executable_extensions,
    get_runtime_rid,
    make_executable,
)


@pytest.mark.parametrize(
    ("platform_name", "machine", "expected"),
    [
        ("linux", "x86_64", "linux-x64"),
        ("linux", "aarch64", "linux-arm64"),
        ("darwin", "arm64", "osx-arm64"),
        ("darwin", "x86_64", "osx-x64"),
        ("win32", "AMD64", "win-x64"),
        ("win32", "ARM64", "win-arm64"),
    ],
)
def test_get_runtime_rid(monkeypatch, platform_name, machine, expected):
    monkeypatch.setattr(sys, "platform", platform_name)
    monkeypatch.setattr(runtime.platform, "machine", lambda: machine)

    assert get_runtime_rid() == expected


class TestExecutableExtensions:
    def test_empty_off_windows(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("PATHEXT", ".EXE")
        assert executable_extensions() == []

    def test_reads_pathext_on_windows(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("PATHEXT", ".EXE;.CMD;")
        assert executable_extensions() == [".EXE", ".CMD"]

    def test_default_pathext_on_windows(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.delenv("PATHEXT", raising=False)
        assert ".EXE" in executable_extensions()


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
def test_make_executable_sets_0755(tmp_path):
    target = tmp_path / "tool"
    target.write_bytes(b"")
    os.chmod(target, 0o600)

    make_executable(str(target))

    assert stat.S_IMODE(target.stat().st_mode) == 0o755
