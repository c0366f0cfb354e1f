"""Unit tests for concat-list rendering and lossless part merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfspeech.audio.merger import AudioMerger
from pdfspeech.errors import ConcatenationFailed
from pdfspeech.models.datatypes import PartArtifact
from pdfspeech.telemetry.logger import RunLogger
from tests.fakes import FakeProcessRunner, RecordedCall


def _write_parts(directory: Path, texts: dict[int, str]) -> list[PartArtifact]:
    directory.mkdir(parents=True, exist_ok=True)
    parts = []
    for page_index, text in texts.items():
        path = directory / f"part_{page_index:04d}.wav"
        path.write_text(text, encoding="utf-8")
        parts.append(PartArtifact(page_index=page_index, path=path))
    return parts


def test_concatenate_orders_parts_by_page_index(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Parts should be merged in ascending page order regardless of input order."""

    work_dir = tmp_path / "doc_parts"
    parts = _write_parts(work_dir, {3: "[c]", 1: "[a]", 2: "[b]"})
    output_path = tmp_path / "doc.wav"

    result = AudioMerger(run_logger, runner=fake_runner).concatenate(parts, output_path, work_dir)

    assert result == output_path
    assert output_path.read_text(encoding="utf-8") == "[a][b][c]"


def test_concatenate_invokes_concat_demuxer_with_stream_copy(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """ffmpeg should read the list file and copy streams without re-encoding."""

    work_dir = tmp_path / "doc_parts"
    parts = _write_parts(work_dir, {1: "[a]"})

    AudioMerger(run_logger, runner=fake_runner).concatenate(parts, tmp_path / "doc.wav", work_dir)

    args = fake_runner.calls[0].args
    assert args[args.index("-f") + 1] == "concat"
    assert args[args.index("-safe") + 1] == "0"
    assert args[args.index("-c") + 1] == "copy"
    assert args[args.index("-i") + 1] == str(work_dir / "list.txt")
    assert "-y" in args


def test_concatenate_removes_manifest_after_success(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """The list file is an intermediate and should not outlive a successful merge."""

    work_dir = tmp_path / "doc_parts"
    parts = _write_parts(work_dir, {1: "[a]", 2: "[b]"})

    AudioMerger(run_logger, runner=fake_runner).concatenate(parts, tmp_path / "doc.wav", work_dir)

    assert not (work_dir / "list.txt").exists()


def test_render_manifest_escapes_single_quotes(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """Single quotes in part paths should use the concat list escape sequence."""

    part_path = tmp_path / "it's here" / "part_0001.wav"
    merger = AudioMerger(run_logger)

    manifest = merger.render_manifest([PartArtifact(page_index=1, path=part_path)])

    escaped = str(part_path.resolve()).replace("'", "'\\''")
    assert manifest == f"file '{escaped}'\n"
    assert "it'\\''s here" in manifest


def test_render_manifest_writes_one_absolute_line_per_part(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """Each part should produce exactly one absolute `file` directive."""

    parts = [
        PartArtifact(page_index=1, path=tmp_path / "part_0001.wav"),
        PartArtifact(page_index=4, path=tmp_path / "part_0004.wav"),
    ]

    lines = AudioMerger(run_logger).render_manifest(parts).splitlines()

    assert len(lines) == 2
    assert all(line.startswith("file '/") for line in lines)
    assert lines[1].endswith("part_0004.wav'")


def test_concatenate_raises_with_exit_code_and_keeps_manifest(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """A failing merge should report the exit code and leave inputs for diagnosis."""

    runner = FakeProcessRunner(handler=lambda call: 1)
    work_dir = tmp_path / "doc_parts"
    parts = _write_parts(work_dir, {1: "[a]"})

    with pytest.raises(ConcatenationFailed) as exc_info:
        AudioMerger(run_logger, runner=runner).concatenate(parts, tmp_path / "doc.wav", work_dir)

    assert exc_info.value.exit_code == 1
    assert exc_info.value.stage == "concatenate"
    assert (work_dir / "list.txt").exists()


def test_concatenate_rejects_success_without_output(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """Exit code 0 without a written file still fails the merge."""

    runner = FakeProcessRunner(handler=lambda call: 0)
    work_dir = tmp_path / "doc_parts"
    parts = _write_parts(work_dir, {1: "[a]"})

    with pytest.raises(ConcatenationFailed) as exc_info:
        AudioMerger(run_logger, runner=runner).concatenate(parts, tmp_path / "doc.wav", work_dir)

    assert exc_info.value.exit_code == 0


def test_concatenate_maps_missing_ffmpeg_to_exit_code_127(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """An unavailable ffmpeg binary should surface as a concat failure."""

    def _missing(call: RecordedCall) -> int:
        raise FileNotFoundError(call.executable)

    work_dir = tmp_path / "doc_parts"
    parts = _write_parts(work_dir, {1: "[a]"})

    with pytest.raises(ConcatenationFailed) as exc_info:
        AudioMerger(run_logger, runner=FakeProcessRunner(handler=_missing)).concatenate(
            parts, tmp_path / "doc.wav", work_dir
        )

    assert exc_info.value.exit_code == 127


def test_concatenate_requires_at_least_one_part(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """An empty part list is a caller error and must not spawn ffmpeg."""

    with pytest.raises(ValueError):
        AudioMerger(run_logger, runner=fake_runner).concatenate(
            [], tmp_path / "doc.wav", tmp_path / "doc_parts"
        )
    assert fake_runner.calls == []
