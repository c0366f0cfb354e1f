"""Unit tests for per-page Piper synthesis and part merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfspeech.audio.merger import AudioMerger
from pdfspeech.errors import MissingSynthesisOutput, PageSynthesisFailed
from pdfspeech.models.datatypes import SynthesisJob
from pdfspeech.telemetry.logger import RunLogger
from pdfspeech.tts.synthesizer import PiperSynthesizer
from tests.fakes import FakeProcessRunner, RecordedCall, emulate_tools, failing_piper_page


def _synthesizer(runner: FakeProcessRunner, run_logger: RunLogger) -> PiperSynthesizer:
    merger = AudioMerger(run_logger, ffmpeg_path="ffmpeg", runner=runner)
    return PiperSynthesizer("piper", run_logger, merger, runner=runner)


def _job(
    tmp_path: Path,
    pages: list[str],
    progress: list[int],
    speaker_id: int | None = None,
) -> SynthesisJob:
    return SynthesisJob(
        text_chunks=iter(pages),
        output_path=tmp_path / "out" / "doc.wav",
        model_path=tmp_path / "voice.onnx",
        speaker_id=speaker_id,
        progress=progress.append,
    )


def test_generate_synthesizes_each_page_and_merges_in_order(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Two text pages should produce two parts merged once in page order."""

    progress: list[int] = []
    job = _job(tmp_path, ["Page 1", "Page 2"], progress)

    _synthesizer(fake_runner, run_logger).generate(job)

    piper_calls = fake_runner.calls_to("piper")
    assert [call.stdin for call in piper_calls] == [["Page 1"], ["Page 2"]]
    assert [Path(call.option("--output_file")).name for call in piper_calls] == [
        "part_0001.wav",
        "part_0002.wav",
    ]
    concat_calls = fake_runner.calls_to("ffmpeg")
    assert len(concat_calls) == 1
    assert concat_calls[0].manifest is not None
    assert concat_calls[0].manifest.index("part_0001.wav") < concat_calls[0].manifest.index(
        "part_0002.wav"
    )
    assert job.output_path.read_text(encoding="utf-8") == "[Page 1][Page 2]"
    assert progress == [1, 2]
    assert not (tmp_path / "out" / "doc_parts").exists()


def test_generate_skips_blank_pages_but_reports_their_progress(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Whitespace-only pages should advance progress without producing a part."""

    progress: list[int] = []
    job = _job(tmp_path, ["", "Hello", "  \n\t "], progress)

    _synthesizer(fake_runner, run_logger).generate(job)

    piper_calls = fake_runner.calls_to("piper")
    assert len(piper_calls) == 1
    assert Path(piper_calls[0].option("--output_file")).name == "part_0002.wav"
    assert job.output_path.read_text(encoding="utf-8") == "[Hello]"
    assert progress == [1, 2, 3]


def test_generate_trims_page_text_before_streaming_to_piper(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Leading and trailing whitespace should not reach the engine."""

    job = _job(tmp_path, ["  Hello world \n"], [])

    _synthesizer(fake_runner, run_logger).generate(job)

    assert fake_runner.calls_to("piper")[0].stdin == ["Hello world"]


def test_generate_with_only_blank_pages_produces_no_output(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
    log_buffer,
) -> None:
    """No parts means no merge, no output file, and a removed workspace."""

    progress: list[int] = []
    job = _job(tmp_path, ["", " ", "\n"], progress)

    _synthesizer(fake_runner, run_logger).generate(job)

    assert fake_runner.calls == []
    assert not job.output_path.exists()
    assert not (tmp_path / "out" / "doc_parts").exists()
    assert progress == [1, 2, 3]
    assert "No parts produced" in log_buffer.getvalue()


def test_generate_aborts_on_first_failing_page(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """A failing first page should stop synthesis before later pages and the merge."""

    runner = FakeProcessRunner(handler=failing_piper_page("One", exit_code=1))
    progress: list[int] = []
    job = _job(tmp_path, ["One", "Two", "Three"], progress)

    with pytest.raises(PageSynthesisFailed) as exc_info:
        _synthesizer(runner, run_logger).generate(job)

    assert exc_info.value.page_index == 1
    assert exc_info.value.exit_code == 1
    assert len(runner.calls_to("piper")) == 1
    assert runner.calls_to("ffmpeg") == []
    assert not job.output_path.exists()
    assert progress == []


def test_generate_keeps_earlier_parts_when_a_later_page_fails(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """Parts created before the failure stay on disk for diagnosis."""

    runner = FakeProcessRunner(handler=failing_piper_page("Two", exit_code=2))
    job = _job(tmp_path, ["One", "Two"], [])

    with pytest.raises(PageSynthesisFailed) as exc_info:
        _synthesizer(runner, run_logger).generate(job)

    assert exc_info.value.page_index == 2
    assert (tmp_path / "out" / "doc_parts" / "part_0001.wav").exists()


def test_generate_rejects_success_without_output_file(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """Exit code 0 without a written part counts as a page failure."""

    def _silent_piper(call: RecordedCall) -> int:
        if "--output_file" in call.args and call.stdin == ["Two"]:
            return 0
        return emulate_tools(call)

    runner = FakeProcessRunner(handler=_silent_piper)
    job = _job(tmp_path, ["One", "Two"], [])

    with pytest.raises(MissingSynthesisOutput) as exc_info:
        _synthesizer(runner, run_logger).generate(job)

    assert exc_info.value.page_index == 2
    assert exc_info.value.exit_code == 0


def test_generate_reports_missing_piper_as_page_failure(
    tmp_path: Path,
    run_logger: RunLogger,
) -> None:
    """A missing Piper binary should fail the first page with exit code 127."""

    def _missing(call: RecordedCall) -> int:
        raise FileNotFoundError(call.executable)

    runner = FakeProcessRunner(handler=_missing)

    with pytest.raises(PageSynthesisFailed) as exc_info:
        _synthesizer(runner, run_logger).generate(_job(tmp_path, ["One"], []))

    assert exc_info.value.exit_code == 127


def test_generate_passes_model_and_speaker_arguments(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Piper should receive the model path and the optional speaker id."""

    job = _job(tmp_path, ["Hello"], [], speaker_id=4)

    _synthesizer(fake_runner, run_logger).generate(job)

    call = fake_runner.calls_to("piper")[0]
    assert call.option("--model") == str(tmp_path / "voice.onnx")
    assert call.option("--speaker") == "4"


def test_generate_omits_speaker_argument_when_unset(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Single-speaker models should not receive a `--speaker` flag."""

    _synthesizer(fake_runner, run_logger).generate(_job(tmp_path, ["Hello"], []))

    assert "--speaker" not in fake_runner.calls_to("piper")[0].args


def test_generate_clears_stale_parts_from_an_earlier_run(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Leftover parts must never leak into a new merge."""

    stale_dir = tmp_path / "out" / "doc_parts"
    stale_dir.mkdir(parents=True)
    (stale_dir / "part_0009.wav").write_text("[stale]", encoding="utf-8")

    job = _job(tmp_path, ["Fresh"], [])
    _synthesizer(fake_runner, run_logger).generate(job)

    manifest = fake_runner.calls_to("ffmpeg")[0].manifest
    assert manifest is not None
    assert "part_0009.wav" not in manifest
    assert job.output_path.read_text(encoding="utf-8") == "[Fresh]"


def test_synthesize_page_rejects_blank_text(
    tmp_path: Path,
    fake_runner: FakeProcessRunner,
    run_logger: RunLogger,
) -> None:
    """Blank text is the caller's responsibility to skip."""

    with pytest.raises(ValueError):
        _synthesizer(fake_runner, run_logger).synthesize_page(
            "   ",
            tmp_path / "voice.onnx",
            None,
            tmp_path / "part.wav",
        )
    assert fake_runner.calls == []
