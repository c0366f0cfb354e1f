"""Unit tests for deterministic runtime executable resolution."""

from __future__ import annotations

from pathlib import Path
import sys

from pytest import MonkeyPatch

from pdfspeech import runtime_tools


def test_resolve_executable_prefers_bundled_bin_over_path(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Bundled `bin` executable should take precedence over PATH discovery."""

    bundled_bin = tmp_path / "bin"
    bundled_bin.mkdir(parents=True, exist_ok=True)
    bundled_tool = bundled_bin / "ffmpeg"
    bundled_tool.write_text("stub", encoding="utf-8")
    monkeypatch.setattr(runtime_tools, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: "/usr/bin/ffmpeg")

    resolved = runtime_tools.resolve_executable("ffmpeg")

    assert resolved == str(bundled_tool)


def test_resolve_executable_falls_back_to_path_when_not_bundled(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """PATH lookup should be used when no bundled executable is present."""

    monkeypatch.setattr(runtime_tools, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: "/usr/bin/pdftotext")

    resolved = runtime_tools.resolve_executable("pdftotext")

    assert resolved == "/usr/bin/pdftotext"


def test_resolve_executable_keeps_explicit_paths_and_unknown_names(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Explicit paths are returned untouched and unknown names pass through."""

    monkeypatch.setattr(runtime_tools, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: None)

    assert runtime_tools.resolve_executable("/opt/piper/piper") == "/opt/piper/piper"
    assert runtime_tools.resolve_executable("piper") == "piper"


def test_probe_executable_reports_startable_commands() -> None:
    """Probing should succeed for a working binary and fail for a missing one."""

    assert runtime_tools.probe_executable(sys.executable, ("-c", "pass")) is True
    assert runtime_tools.probe_executable(sys.executable, ("-c", "raise SystemExit(1)")) is False
    assert runtime_tools.probe_executable("pdfspeech-definitely-missing-tool") is False


def test_resolve_piper_executable_prefers_local_unpack(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """A `piper/piper` unpack in the working directory should win over PATH."""

    local_piper = tmp_path / "piper" / "piper"
    local_piper.parent.mkdir()
    local_piper.write_text("stub", encoding="utf-8")
    monkeypatch.setattr(runtime_tools, "probe_executable", lambda executable, *_: True)

    resolved = runtime_tools.resolve_piper_executable("piper", working_dir=tmp_path)

    assert resolved == str(local_piper.resolve())


def test_resolve_piper_executable_returns_none_when_piper_cannot_start(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """A configured Piper that cannot start should resolve to `None`."""

    monkeypatch.setattr(runtime_tools, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: "/usr/bin/piper")
    monkeypatch.setattr(runtime_tools, "probe_executable", lambda executable, *_: False)

    assert runtime_tools.resolve_piper_executable("piper", working_dir=tmp_path) is None
