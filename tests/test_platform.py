"""Tests for macos_control.core.platform."""

from __future__ import annotations

import subprocess

import pytest

from macos_control.core import platform as mc_platform
from macos_control.core.errors import ErrorKind


@pytest.fixture
def on_macos(monkeypatch):
    monkeypatch.setattr(mc_platform, "os_type", lambda: ("unix", "darwin"))


@pytest.fixture
def on_linux(monkeypatch):
    monkeypatch.setattr(mc_platform, "os_type", lambda: ("unix", "linux"))


def fake_sw_vers(monkeypatch, stdout="14.2.1\n", returncode=0, stderr=""):
    calls = []

    def run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

    monkeypatch.setattr(mc_platform.subprocess, "run", run)
    return calls


class TestDetection:
    """Tests for OS detection."""

    def test_os_type_darwin(self, monkeypatch):
        monkeypatch.setattr(mc_platform.platform, "system", lambda: "Darwin")
        assert mc_platform.os_type() == ("unix", "darwin")
        assert mc_platform.is_macos() is True

    def test_os_type_linux(self, monkeypatch):
        monkeypatch.setattr(mc_platform.platform, "system", lambda: "Linux")
        assert mc_platform.os_type()[1] == "linux"
        assert mc_platform.is_macos() is False

    def test_is_macos_false_on_linux(self, on_linux):
        assert mc_platform.is_macos() is False

    def test_osascript_available(self, monkeypatch):
        monkeypatch.setattr(mc_platform.shutil, "which", lambda name: "/usr/bin/osascript")
        assert mc_platform.osascript_available() is True
        monkeypatch.setattr(mc_platform.shutil, "which", lambda name: None)
        assert mc_platform.osascript_available() is False


class TestValidation:
    """Tests for Result-returning validators."""

    def test_validate_macos_ok(self, on_macos):
        assert mc_platform.validate_macos().is_ok()

    def test_validate_macos_err(self, on_linux):
        result = mc_platform.validate_macos()
        assert result.is_err()
        assert result.error.kind is ErrorKind.UNSUPPORTED_PLATFORM
        assert result.error.details["platform"] == "linux"

    def test_validate_osascript_off_macos(self, on_linux, monkeypatch):
        monkeypatch.setattr(mc_platform.shutil, "which", lambda name: None)
        result = mc_platform.validate_osascript()
        assert result.error.kind is ErrorKind.UNSUPPORTED_PLATFORM

    def test_validate_osascript_missing_on_macos(self, on_macos, monkeypatch):
        monkeypatch.setattr(mc_platform.shutil, "which", lambda name: None)
        result = mc_platform.validate_osascript()
        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.details["file"] == "osascript"

    def test_validate_osascript_ok(self, on_macos, monkeypatch):
        monkeypatch.setattr(mc_platform.shutil, "which", lambda name: "/usr/bin/osascript")
        assert mc_platform.validate_osascript().is_ok()


class TestMacOSVersion:
    """Tests for version queries."""

    def test_version_from_sw_vers(self, on_macos, monkeypatch):
        calls = fake_sw_vers(monkeypatch)
        assert mc_platform.macos_version().unwrap() == "14.2.1"
        assert calls == [["sw_vers", "-productVersion"]]

    def test_version_off_macos_does_not_run_sw_vers(self, on_linux, monkeypatch):
        calls = fake_sw_vers(monkeypatch)
        result = mc_platform.macos_version()
        assert result.error.kind is ErrorKind.UNSUPPORTED_PLATFORM
        assert calls == []

    def test_sw_vers_failure(self, on_macos, monkeypatch):
        fake_sw_vers(monkeypatch, stdout="", returncode=1, stderr="boom")
        result = mc_platform.macos_version()
        assert result.error.kind is ErrorKind.EXECUTION_ERROR
        assert result.error.details == {"exit_code": 1, "stderr": "boom"}

    def test_sw_vers_missing(self, on_macos, monkeypatch):
        def run(args, **kwargs):
            raise FileNotFoundError(args[0])

        monkeypatch.setattr(mc_platform.subprocess, "run", run)
        assert mc_platform.macos_version().error.kind is ErrorKind.NOT_FOUND

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("14", (14, 0, 0)),
            ("14.0", (14, 0, 0)),
            ("13.5.1", (13, 5, 1)),
            ("ProductVersion: 14.0", (14, 0, 0)),
            ("  12.7\n", (12, 7, 0)),
        ],
        ids=["major", "major-minor", "full", "sw-vers-line", "whitespace"],
    )
    def test_parse(self, text, expected):
        assert mc_platform.parse_macos_version(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "invalid", "14.x", "1.2.3.4", "-1.0"],
        ids=["empty", "word", "letter", "four-parts", "negative"],
    )
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError, match="Invalid version format"):
            mc_platform.parse_macos_version(text)

    @pytest.mark.parametrize(
        "first,second,expected",
        [
            ((14, 0, 0), (13, 5, 1), 1),
            ((13, 5, 1), (14, 0, 0), -1),
            ((14, 0, 0), (14, 0, 0), 0),
            ((14, 0), (14, 0, 0), 0),
            ((14,), (13, 9), 1),
        ],
        ids=["gt", "lt", "eq", "short-eq", "major-only"],
    )
    def test_compare(self, first, second, expected):
        assert mc_platform.compare_version(first, second) == expected

    def test_compare_rejects_bad_tuple(self):
        with pytest.raises(ValueError):
            mc_platform.compare_version((1, 2, 3, 4), (1,))

    def test_version_at_least(self, on_macos, monkeypatch):
        fake_sw_vers(monkeypatch, stdout="13.5.1\n")
        assert mc_platform.version_at_least((13, 0)) is True
        assert mc_platform.version_at_least((13, 5, 1)) is True
        assert mc_platform.version_at_least((14,)) is False

    def test_version_at_least_off_macos(self, on_linux):
        assert mc_platform.version_at_least((1,)) is False

    def test_version_at_least_unparseable(self, on_macos, monkeypatch):
        fake_sw_vers(monkeypatch, stdout="garbage\n")
        assert mc_platform.version_at_least((1,)) is False
